import asyncio

from polywiki.api import (
    EntryStatus,
    PolywikiError,
    ProviderConfigError,
    SessionController,
    parse_document,
)


def test_library_consumer_can_drive_a_session():
    chunks = ["## General\nA word about", " words.\n## Usage\nOften.\n## Related\n- Lexicon"]

    async def scenario():
        controller = SessionController(lambda entry: iter(chunks))
        entry = controller.submit("Word")
        await controller.wait(entry)
        return controller, entry

    controller, entry = asyncio.run(scenario())
    assert entry.status is EntryStatus.COMPLETE
    assert controller.document().titles == ["General", "Usage"]
    assert parse_document(entry.content).related == ("Lexicon",)


def test_exception_hierarchy():
    assert issubclass(ProviderConfigError, PolywikiError)
