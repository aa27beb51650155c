"""parser モジュールのユニットテスト."""

from altfinder.parser import (
    build_alternative,
    build_records,
    extract_json_array,
    strip_code_fences,
)

GIMP_JSON = (
    '[{"name":"GIMP","url":"https://gimp.org","category":"Image Editing",'
    '"description":"Free raster graphics editor","tags":["editor","raster"]}]'
)


class TestExtractJsonArray:
    """extract_json_array のテスト."""

    def test_plain_array(self):
        result = extract_json_array(GIMP_JSON)
        assert len(result) == 1
        assert result[0]["name"] == "GIMP"

    def test_code_fenced(self):
        """```json フェンス付きでもパースできること."""
        text = f"```json\n{GIMP_JSON}\n```"
        result = extract_json_array(text)
        assert result[0]["url"] == "https://gimp.org"

    def test_surrounding_prose(self):
        """前後に説明文があっても最初の [ 〜最後の ] を読むこと."""
        text = f"Here are some alternatives:\n{GIMP_JSON}\nHope this helps!"
        result = extract_json_array(text)
        assert [r["name"] for r in result] == ["GIMP"]

    def test_plain_prose(self):
        """配列が無い場合は None を返すこと."""
        assert extract_json_array("Sorry, I could not find anything.") is None

    def test_broken_json(self):
        assert extract_json_array('[{"name": "GIMP",]') is None

    def test_empty_array(self):
        assert extract_json_array("[]") == []

    def test_empty_text(self):
        assert extract_json_array("") is None


class TestStripCodeFences:
    """strip_code_fences のテスト."""

    def test_removes_fences(self):
        assert strip_code_fences("```json\n[1]\n```") == "[1]\n"

    def test_no_fences(self):
        assert strip_code_fences("  [1]  ") == "[1]"


class TestBuildAlternative:
    """build_alternative のテスト."""

    def test_maps_fields(self):
        entry = {
            "name": "GIMP",
            "url": "https://gimp.org",
            "category": "Image Editing",
            "description": "Free raster graphics editor",
            "tags": ["editor", "raster"],
        }
        alt = build_alternative(entry, "Photoshop")

        assert alt.name == "GIMP"
        assert alt.url == "https://gimp.org"
        assert alt.category == "Image Editing"
        assert alt.short_description == "Free raster graphics editor"
        assert alt.tags == ["editor", "raster", "photoshop"]

    def test_missing_tags(self):
        """tags が無い場合は検索語のみになること."""
        alt = build_alternative({"name": "Krita"}, "Photoshop")
        assert alt.tags == ["photoshop"]

    def test_tags_lowercased_and_deduplicated(self):
        alt = build_alternative(
            {"name": "Krita", "tags": ["Painting", "painting", "PHOTOSHOP", ""]},
            "Photoshop",
        )
        assert alt.tags == ["painting", "photoshop"]

    def test_long_description_truncated(self):
        alt = build_alternative({"name": "Krita", "description": "x" * 150}, "Photoshop")
        assert len(alt.short_description) == 100
        assert alt.short_description.endswith("...")

    def test_missing_name(self):
        assert build_alternative({"url": "https://example.com"}, "Photoshop") is None

    def test_not_a_dict(self):
        assert build_alternative("GIMP", "Photoshop") is None


class TestBuildRecords:
    """build_records のテスト."""

    def test_skips_invalid_entries(self):
        records = build_records([{"name": "GIMP"}, "junk", {"name": ""}], "Photoshop")
        assert [r.name for r in records] == ["GIMP"]

    def test_duplicate_names_last_wins(self):
        records = build_records(
            [
                {"name": "GIMP", "url": "https://old.example"},
                {"name": "Krita"},
                {"name": "GIMP", "url": "https://gimp.org"},
            ],
            "Photoshop",
        )
        assert [r.name for r in records] == ["Krita", "GIMP"]
        assert records[1].url == "https://gimp.org"
