import pytest

from reelindex.parser import (
    DEFAULT_LANGUAGE,
    KeywordLanguageDetector,
    ParsedRelease,
    clean_title,
    parse_caption,
)
from reelindex.quality import QUALITY_TAGS, UNKNOWN_QUALITY
from reelindex.sizes import UNKNOWN_SIZE
from reelindex.year_filter import UNKNOWN_YEAR


pytestmark = pytest.mark.parsing


def test_scene_movie_name():
    release = parse_caption("Interstellar.2014.1080p.BluRay.x264", 0)
    assert release.year == "2014"
    assert "Interstellar" in release.title
    assert "2014" not in release.title
    assert "1080p" not in release.title
    assert release.quality == "1080p"
    assert "X264" in release.codec
    assert release.size_label == UNKNOWN_SIZE
    assert release.language == DEFAULT_LANGUAGE


def test_title_cut_at_quality_when_no_year():
    release = parse_caption("Lucifer.S05E08.iNTERNAL.1080p.WEB.H264-STRiFE", 0)
    assert release.year == UNKNOWN_YEAR
    assert release.title == "Lucifer S05E08 iNTERNAL"
    assert release.quality == "1080p"
    assert release.codec == "H264"


def test_whole_caption_is_title_without_year_or_quality():
    release = parse_caption("Some_Home.Video", 0)
    assert release.title == "Some Home Video"
    assert release.quality == UNKNOWN_QUALITY


def test_codecs_are_collected_in_order_and_uppercased():
    release = parse_caption("Movie.2020.720p.WEB-DL.x265.10bit.HEVC-PSA", 0)
    assert release.title == "Movie"
    assert release.codec == "X265 10BIT HEVC PSA"


def test_year_in_parentheses_and_mixed_separators():
    release = parse_caption("The_Dark-Knight (2008) 720p", 0)
    assert release.year == "2008"
    assert release.title == "The Dark Knight"


def test_year_between_dashes():
    assert parse_caption("Movie-2010-GROUP", 0).year == "2010"


def test_year_glued_to_word_is_not_a_year():
    release = parse_caption("Movie2010", 0)
    assert release.year == UNKNOWN_YEAR
    assert release.title == "Movie2010"


def test_first_year_wins():
    release = parse_caption("Blade Runner 2049 2017 1080p", 0)
    assert release.year == "2049"
    assert release.title == "Blade Runner"


def test_year_only_caption_gives_empty_title():
    release = parse_caption("1999", 0)
    assert release.year == "1999"
    assert release.title == ""


def test_size_label_uses_formatter():
    assert parse_caption("Movie", 1536).size_label == "1.5 KB"


@pytest.mark.parametrize("caption", ["", " ", "....", "\n\n", "()", "🎬 какой-то фильм", None])
@pytest.mark.parametrize("size_bytes", [0, 1, 5 * 1024 ** 3])
def test_parsing_is_total(caption, size_bytes):
    release = parse_caption(caption, size_bytes)
    assert isinstance(release, ParsedRelease)
    assert isinstance(release.title, str)
    assert release.year == UNKNOWN_YEAR or (release.year.isdigit() and len(release.year) == 4)
    assert release.quality in QUALITY_TAGS or release.quality == UNKNOWN_QUALITY
    assert isinstance(release.codec, str)
    assert release.size_label
    assert release.language


def test_negative_size_is_rejected():
    with pytest.raises(ValueError):
        parse_caption("Movie", -5)


def test_clean_title_collapses_separators():
    assert clean_title("  A..B__C--D (E)  ") == "A B C D E"


def test_custom_language_detector():
    release = parse_caption("Movie 2020", 0, language_detector=lambda caption: "Bulgarian")
    assert release.language == "Bulgarian"


@pytest.mark.parametrize(
    ("caption", "expected"),
    [
        ("Movie 2020 Hindi Dual Audio 720p", "Multi"),
        ("Movie.2020.Tamil.HDRip", "Tamil"),
        ("Movie.2020.ENG.1080p", "English"),
        ("Movie 2020", "Unknown"),
    ],
)
def test_keyword_language_detector(caption, expected):
    detector = KeywordLanguageDetector(default="Unknown")
    assert parse_caption(caption, 0, language_detector=detector).language == expected


def test_to_dict_has_every_field():
    data = parse_caption("Heat.1995.720p", 0).to_dict()
    assert set(data) == {"title", "year", "quality", "codec", "size_label", "language"}
