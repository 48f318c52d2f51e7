from polywiki.session import EntryKind, EntryStatus, HistoryEntry, HistoryStack
from polywiki.session.history import ImageAttachment


def _labels(stack: HistoryStack):
    return [entry.label for entry in stack]


def test_empty_stack():
    stack = HistoryStack()
    assert len(stack) == 0
    assert stack.cursor == -1
    assert stack.active is None
    assert not stack.can_go_back
    assert not stack.can_go_forward


def test_push_moves_cursor_to_new_entry():
    stack = HistoryStack()
    stack.push(HistoryEntry("A"))
    index = stack.push(HistoryEntry("B"))
    assert index == 1
    assert stack.cursor == 1
    assert stack.active.label == "B"


def test_push_from_middle_discards_forward_history():
    stack = HistoryStack()
    for label in ("A", "B", "C"):
        stack.push(HistoryEntry(label))
    assert stack.back()
    assert stack.back()
    stack.push(HistoryEntry("D"))
    assert _labels(stack) == ["A", "D"]
    assert stack.cursor == 1


def test_back_forward_respect_bounds():
    stack = HistoryStack()
    stack.push(HistoryEntry("A"))
    assert not stack.back()
    assert not stack.forward()
    stack.push(HistoryEntry("B"))
    assert stack.back()
    assert stack.active.label == "A"
    assert stack.forward()
    assert stack.active.label == "B"


def test_move_to_rejects_out_of_range():
    stack = HistoryStack()
    stack.push(HistoryEntry("A"))
    assert not stack.move_to(3)
    assert not stack.move_to(-1)
    assert stack.cursor == 0


def test_identity_checks():
    stack = HistoryStack()
    first = HistoryEntry("A")
    stack.push(first)
    twin = HistoryEntry("A")
    assert stack.contains_at(first, 0)
    assert not stack.contains_at(twin, 0)
    assert not stack.contains_at(first, 1)


def test_clear_resets_cursor():
    stack = HistoryStack()
    stack.push(HistoryEntry("A"))
    removed = stack.clear()
    assert [entry.label for entry in removed] == ["A"]
    assert stack.cursor == -1
    assert len(stack) == 0


def test_entry_defaults_and_label_matching():
    entry = HistoryEntry("Entropy")
    assert entry.kind is EntryKind.TEXT
    assert entry.status is EntryStatus.PENDING
    assert entry.content is None
    assert entry.matches("  entropy ")
    assert not entry.matches("Entropic")
    assert HistoryEntry("x").id != HistoryEntry("x").id


def test_entry_kind_parse():
    assert EntryKind.parse("image") is EntryKind.IMAGE
    assert EntryKind.parse("text") is EntryKind.TEXT
    assert EntryKind.parse(None) is EntryKind.TEXT


def test_image_attachment_reads_and_releases(tmp_path):
    path = tmp_path / "photo.png"
    path.write_bytes(b"\x89PNG")
    image = ImageAttachment.from_path(path)
    assert image.mime_type == "image/png"
    assert image.read_base64() == "iVBORw=="
    image.release()
    assert image.released
