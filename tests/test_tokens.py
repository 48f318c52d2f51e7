from polywiki.content import tokenize
from polywiki.content.tokens import Fragment, clean_word, clickable_words


def test_reconstructs_input_exactly():
    body = "Hello, world!"
    fragments = list(tokenize(body))
    assert "".join(fragment.text for fragment in fragments) == body
    assert [f.word for f in fragments if f.clickable] == ["Hello", "world"]


def test_whitespace_runs_are_kept_and_never_clickable():
    body = "one  two\n\tthree"
    fragments = list(tokenize(body))
    assert fragments == [
        Fragment("one", "one"),
        Fragment("  "),
        Fragment("two", "two"),
        Fragment("\n\t"),
        Fragment("three", "three"),
    ]


def test_rendered_text_keeps_punctuation():
    fragment = next(tokenize("(“Recursion”),"))
    assert fragment.text == "(“Recursion”),"
    assert fragment.word == "Recursion"


def test_pure_punctuation_is_not_clickable():
    fragments = list(tokenize("wait -- ... ok"))
    words = {f.text: f.word for f in fragments if not f.text.isspace()}
    assert words["..."] is None
    assert words["--"] == "--"
    assert words["ok"] == "ok"


def test_markdown_emphasis_is_stripped_from_word():
    assert clean_word("**FACT:**") == "FACT"
    assert clickable_words("It's `code`") == ["It's", "code"]


def test_emphasis_only_fragments_are_not_clickable():
    fragments = list(tokenize("* _private_ __"))
    assert [fragment.word for fragment in fragments if not fragment.text.isspace()] == [
        None,
        "private",
        None,
    ]


def test_each_call_is_a_fresh_sequence():
    body = "a b"
    assert list(tokenize(body)) == list(tokenize(body))
    assert list(tokenize("")) == []
