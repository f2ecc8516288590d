import pytest

from reelindex.normalize import (
    DEFAULT_STRATEGY,
    NormalizeStrategy,
    normalize_title,
    strip_tokens,
    truncate_at_marker,
)


# Raw titles seen in storage channels and the search key that finds them
# upstream.
CORPUS = {
    "Stranger Things S02E06 iNTERNAL 720p WEB-DL x264": "stranger things",
    "Game of Thrones Season 5 Complete": "game of thrones",
    "The Witcher 2019 S01E01": "the witcher",
    "Lucifer.S05E08.iNTERNAL.1080p.WEB.H264-STRiFE": "lucifer",
    "Class of 09 S01E01": "class of 09",
    "Show.Name.1080p.S01E01.WEB": "show name",
    "Some_Show_S02_PROPER_720p": "some show",
    "Interstellar.2014.1080p.BluRay.x264.mkv": "interstellar",
    "Dune 2021 2160p HEVC": "dune",
}


@pytest.mark.parametrize(("raw", "expected"), sorted(CORPUS.items()))
def test_default_strategy_on_corpus(raw, expected):
    assert normalize_title(raw) == expected


def test_truncate_dominates_strip_on_corpus():
    strip_hits = {raw for raw, want in CORPUS.items() if normalize_title(raw, NormalizeStrategy.STRIP) == want}
    truncate_hits = {raw for raw, want in CORPUS.items() if normalize_title(raw, NormalizeStrategy.TRUNCATE) == want}

    assert strip_hits <= truncate_hits
    assert truncate_hits == set(CORPUS)
    assert len(strip_hits) < len(truncate_hits)
    assert DEFAULT_STRATEGY is NormalizeStrategy.TRUNCATE


def test_strip_keeps_release_noise_after_marker():
    assert strip_tokens("Lucifer.S05E08.iNTERNAL.1080p.WEB.H264-STRiFE") == "lucifer web h264 strife"
    assert strip_tokens("Game of Thrones Season 5 Complete") == "game of thrones complete"


def test_marker_at_start_does_not_truncate():
    assert truncate_at_marker("S01E01 Pilot") == "S01E01 Pilot"
    assert normalize_title("S01E01 Pilot") == "pilot"


def test_strategy_accepts_plain_strings():
    assert normalize_title("Heat.1995.mkv", "strip") == "heat"
    with pytest.raises(ValueError):
        normalize_title("Heat", "guess")


def test_empty_title():
    assert normalize_title("") == ""
    assert normalize_title(None) == ""
