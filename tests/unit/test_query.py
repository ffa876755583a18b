import time

import pytest

from memexfs.config import StoreConfig
from memexfs.core import MemexFS
from memexfs.errors import InvalidPattern
from memexfs.retrieval.query import MatchMode, QueryEngine, classify, glob_match
from memexfs.retrieval.store import DocumentStore


@pytest.mark.parametrize(
    ("pattern", "mode"),
    [
        ("archive", MatchMode.TOKEN),
        ("Archive", MatchMode.TOKEN),
        ("snake_case", MatchMode.TOKEN),
        ("559571", MatchMode.TOKEN),
        ("hackathon in sekoya", MatchMode.PHRASE),
        ("e-mail", MatchMode.PHRASE),
        ("https?://", MatchMode.REGEX),
        ("a.b", MatchMode.REGEX),
        ("reset|refund", MatchMode.REGEX),
        ("^#", MatchMode.REGEX),
    ],
)
def test_classify(pattern: str, mode: MatchMode) -> None:
    assert classify(pattern) is mode


@pytest.mark.parametrize(
    ("glob", "path", "expected"),
    [
        ("tar.md", "tar.md", True),
        ("*.md", "top.md", True),
        ("*.md", "a/b.md", False),
        ("a/*/c.md", "a/b/c.md", True),
        ("a/*/c.md", "a/b/x/c.md", False),
        ("billing/**/*.md", "billing/refund.md", True),
        ("billing/**/*.md", "billing/2024/q1/refund.md", True),
        ("billing/**/*.md", "account/refund.md", False),
        ("**/*.md", "a/b/c.md", True),
        ("**", "anything/at/all.md", True),
        ("tar?md", "tar.md", False),
        ("data[1].md", "data[1].md", True),
    ],
)
def test_glob_match(glob: str, path: str, expected: bool) -> None:
    assert glob_match(glob, path) is expected


def test_grep_simple(small_fs: MemexFS) -> None:
    results = small_fs.grep("password")

    assert results
    assert any(result.path == "account/password-reset.md" for result in results)


def test_grep_case_insensitive_keeps_original_content(small_fs: MemexFS) -> None:
    results = small_fs.grep("PASSWORD")

    assert [(r.path, r.line) for r in results] == [
        ("account/password-reset.md", 1),
        ("account/password-reset.md", 3),
        ("account/password-reset.md", 6),
    ]
    assert results[0].content == "# Password Reset"


def test_grep_with_glob(small_fs: MemexFS) -> None:
    results = small_fs.grep("refund", "billing/**/*.md")

    assert results
    assert all(result.path.startswith("billing/") for result in results)


def test_grep_glob_without_matches_is_empty(small_fs: MemexFS) -> None:
    assert small_fs.grep("refund", "docs/**/*.md") == []


def test_grep_regex(small_fs: MemexFS) -> None:
    results = small_fs.grep("reset|refund")

    assert len(results) >= 2
    assert {result.path for result in results} == {
        "account/password-reset.md",
        "billing/refund.md",
    }


def test_grep_no_matches_is_empty(small_fs: MemexFS) -> None:
    assert small_fs.grep("kubernetes") == []


def test_grep_invalid_regex(small_fs: MemexFS) -> None:
    with pytest.raises(InvalidPattern) as exc_info:
        small_fs.grep("([")
    assert exc_info.value.pattern == "(["
    assert "([" in str(exc_info.value)


def test_grep_invalid_regex_fails_even_when_glob_matches_nothing(small_fs: MemexFS) -> None:
    with pytest.raises(InvalidPattern):
        small_fs.grep("([", "nowhere/*.md")


def test_grep_empty_pattern_rejected(small_fs: MemexFS) -> None:
    with pytest.raises(InvalidPattern, match="empty search pattern"):
        small_fs.grep("")


def test_grep_substring_in_token() -> None:
    fs = MemexFS.from_documents([("test.md", "This is an archive of data")])

    assert fs.grep("arch")


def test_grep_numeric_substring_in_compound_token() -> None:
    fs = MemexFS.from_documents(
        [
            ("org.md", "Company registered as SE559571232301 in Sweden"),
            ("other.md", "Reference number 559571 standalone"),
            ("unrelated.md", "No match here"),
        ]
    )

    results = fs.grep("559571")
    assert [result.path for result in results] == ["org.md", "other.md"]


def test_grep_phrase_matches_exact_phrase_only() -> None:
    fs = MemexFS.from_documents(
        [
            ("a.md", "hackathon in sekoya was great"),
            ("b.md", "The sekoya hackathon event"),
            ("c.md", "No match here"),
        ]
    )

    results = fs.grep("Hackathon in Sekoya")
    assert len(results) == 1
    assert results[0].path == "a.md"


def test_grep_one_result_per_line() -> None:
    fs = MemexFS.from_documents([("a.md", "keyword keyword KEYWORD\nother\nkeyword")])

    assert [(r.path, r.line) for r in fs.grep("keyword")] == [("a.md", 1), ("a.md", 3)]
    assert [(r.path, r.line) for r in fs.grep("key(word)")] == [("a.md", 1), ("a.md", 3)]
    assert [(r.path, r.line) for r in fs.grep("keyword keyword")] == [("a.md", 1)]


def test_grep_orders_by_path_then_line() -> None:
    fs = MemexFS.from_documents(
        [
            ("z.md", "match\nmatch"),
            ("a/b.md", "nothing\nmatch"),
            ("a.md", "match"),
        ]
    )

    for pattern in ("match", "atch", "mat.h"):
        results = fs.grep(pattern)
        assert [(r.path, r.line) for r in results] == [
            ("a.md", 1),
            ("a/b.md", 2),
            ("z.md", 1),
            ("z.md", 2),
        ]


def test_grep_caps_at_first_100_sorted_results() -> None:
    docs = [(f"doc_{i}.md", "keyword match here\nkeyword match again") for i in range(200)]
    fs = MemexFS.from_documents(docs)

    expected = sorted((path, line) for path, _ in docs for line in (1, 2))[:100]
    for pattern in ("keyword", "keyword match", "key.ord"):
        results = fs.grep(pattern)
        assert len(results) == 100
        assert [(r.path, r.line) for r in results] == expected


def test_grep_cap_follows_config() -> None:
    docs = [(f"doc_{i}.md", "keyword") for i in range(10)]
    fs = MemexFS.from_documents(docs, StoreConfig(max_grep_results=3))

    assert [r.path for r in fs.grep("keyword")] == ["doc_0.md", "doc_1.md", "doc_2.md"]


def test_token_fast_path_equals_linear_scan() -> None:
    docs = [
        ("a.md", "Archive the logs\nNo match\narchived files"),
        ("b/c.md", "An ARCHIVE_v2 entry\nsnake_case token"),
        ("d.md", "nothing here\nsearch archive later"),
    ]
    store = DocumentStore(docs)
    engine = QueryEngine(store)

    for token in ("archive", "arch", "snake_case", "case", "v2", "nothing", "zzz"):
        fast = {(r.path, r.line) for r in engine.grep(token)}
        scan = {
            (doc.path, number)
            for doc in store.documents
            for number, line in enumerate(doc.lines_lower, start=1)
            if token in line
        }
        assert fast == scan, token


def test_token_fast_path_does_not_scan_lines(monkeypatch: pytest.MonkeyPatch) -> None:
    fs = MemexFS.from_documents([("a.md", "archive"), ("b.md", "nothing")])

    def _fail(*args: object, **kwargs: object) -> None:
        raise AssertionError("token queries must not scan lines")

    monkeypatch.setattr(QueryEngine, "_phrase_hits", staticmethod(_fail))
    monkeypatch.setattr(QueryEngine, "_regex_hits", staticmethod(_fail))

    assert [r.path for r in fs.grep("archive")] == ["a.md"]


def test_grep_is_deterministic(small_fs: MemexFS) -> None:
    first = small_fs.grep("re", "**")
    second = small_fs.grep("re", "**")

    assert first == second
    assert first == sorted(first, key=lambda r: (r.path, r.line))


def test_grep_phrase_respects_glob(small_fs: MemexFS) -> None:
    results = small_fs.grep("refund, contact", "billing/*.md")

    assert [(r.path, r.line) for r in results] == [("billing/refund.md", 3)]
    assert small_fs.grep("refund, contact", "account/*.md") == []


def test_grep_regex_respects_glob(small_fs: MemexFS) -> None:
    results = small_fs.grep("re(set|fund)", "account/**")

    assert [(r.path, r.line) for r in results] == [
        ("account/password-reset.md", 1),
        ("account/password-reset.md", 3),
        ("account/password-reset.md", 6),
    ]


def test_grep_nested_quantifier_finishes_quickly() -> None:
    fs = MemexFS.from_documents([("a.md", "a" * 64 + "!")])

    start = time.perf_counter()
    results = fs.grep("(a+)+$")
    elapsed = time.perf_counter() - start

    assert results == []
    assert elapsed < 1.0


def test_grep_backreference_rejected(small_fs: MemexFS) -> None:
    with pytest.raises(InvalidPattern) as exc_info:
        small_fs.grep(r"(re)\1")
    assert exc_info.value.pattern == r"(re)\1"
