from polywiki.content import parse_document, segment
from polywiki.content.sections import GENERAL_TITLE, ParsedDocument, Section


def _pairs(document: ParsedDocument):
    return [(section.title, section.body) for section in document.sections]


def test_text_without_headers_is_single_general_section():
    document = segment("  Entropy is a measure of disorder.\n\nMore text.  ")
    assert _pairs(document) == [
        (GENERAL_TITLE, "Entropy is a measure of disorder.\n\nMore text.")
    ]
    assert document.related == ()


def test_empty_input_has_no_sections():
    assert segment("") == ParsedDocument()
    assert segment("   \n  ").sections == ()


def test_preamble_sections_and_related():
    document = segment("Intro\n## Usage\nBody1\n## Related\n- A\n- B")
    assert _pairs(document) == [("General", "Intro"), ("Usage", "Body1")]
    assert document.related == ("A", "B")


def test_case_variant_duplicate_titles_merge_in_first_position():
    document = segment("## Usage\nX\n## Physics\nP\n## usage\nY")
    assert _pairs(document) == [("Usage", "X\n\nY"), ("Physics", "P")]


def test_general_header_merges_with_preamble():
    document = segment("Lead in\n## General\nBroad definition")
    assert _pairs(document) == [("General", "Lead in\n\nBroad definition")]


def test_related_strips_markers_and_blank_lines():
    document = segment(
        "## General\nG\n## RELATED\n* Thermodynamics\n\n-   Heat death\nPlain line\n"
    )
    assert document.titles == ["General"]
    assert document.related == ("Thermodynamics", "Heat death", "Plain line")


def test_related_keeps_emphasis_without_bullet_marker():
    document = segment("## Related\n**Heat**\n- **Cold**\n*   Warmth\n-Tepid")
    assert document.related == ("**Heat**", "**Cold**", "Warmth", "-Tepid")


def test_multiple_related_sections_append_in_order():
    document = segment("## Related\n- A\n## Physics\nP\n## related\n- B")
    assert document.related == ("A", "B")
    assert document.titles == ["Physics"]


def test_only_exact_h2_markers_split():
    document = segment("## Physics\nText\n### Detail\nMore\n##NoSpace")
    assert document.titles == ["Physics"]
    assert document.sections[0].body == "Text\n### Detail\nMore\n##NoSpace"


def test_header_title_is_trimmed():
    document = segment("##   Computer Science   \nBits")
    assert _pairs(document) == [("Computer Science", "Bits")]


def test_empty_header_title_folds_into_general():
    document = segment("Intro\n## \nOrphan body\n## Physics\nP")
    assert _pairs(document) == [("General", "Intro\n\nOrphan body"), ("Physics", "P")]


def test_header_without_body_yields_empty_section():
    document = segment("## General\nG\n## Physics\n")
    assert _pairs(document) == [("General", "G"), ("Physics", "")]


def test_segment_is_deterministic():
    raw = "Intro\n## Usage\nBody\n## usage\nMore\n## Related\n- X"
    assert segment(raw) == segment(raw)


def test_parse_document_hides_partial_header_only_while_streaming():
    raw = "## General\nBody text\n## Phil"
    assert parse_document(raw, is_streaming=True).titles == ["General"]
    assert parse_document(raw, is_streaming=False).titles == ["General", "Phil"]


def test_find_and_resolve_tab():
    document = segment("## General\nG\n## Physics\nP")
    assert document.find("physics") == Section("Physics", "P")
    assert document.find("Biology") is None
    assert document.resolve_tab("PHYSICS").title == "Physics"
    assert document.resolve_tab("Biology").title == "General"
    assert document.resolve_tab(None).title == "General"
    assert ParsedDocument().resolve_tab("General") is None


def test_streaming_section_is_last_while_loading():
    document = segment("## General\nG\n## Physics\nP")
    general, physics = document.sections
    assert document.is_streaming_section(physics, loading=True)
    assert not document.is_streaming_section(general, loading=True)
    assert not document.is_streaming_section(physics, loading=False)
