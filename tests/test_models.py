"""Unit tests for the content and repository models."""

import pytest

from pytea.exceptions import FeatureSetError, GiteaInvalidContentError, GiteaParseError
from pytea.models import (
    ApiToken,
    ContentEntry,
    ContentListing,
    ContentType,
    FeatureSet,
    Repository,
    Version,
)


class TestContentType:
    """Tests for parsing the content type field."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("file", ContentType.FILE),
            ("dir", ContentType.DIR),
            ("symlink", ContentType.SYMLINK),
            ("submodule", ContentType.SUBMODULE),
        ],
    )
    def test_known_types(self, value, expected):
        assert ContentType.from_api(value) is expected

    def test_unknown_type_is_file(self):
        """Unknown types degrade to files."""
        assert ContentType.from_api("d") is ContentType.FILE
        assert ContentType.from_api("") is ContentType.FILE

    def test_display_name(self):
        assert str(ContentType.DIR) == "Dir"


class TestContentEntry:
    """Tests for ContentEntry.from_api_response."""

    def test_full_entry(self):
        entry = ContentEntry.from_api_response(
            {
                "download_url": "test_url",
                "name": "test_name",
                "path": "test_path",
                "type": "dir",
                "sha": "abc123",
            }
        )
        assert entry.download_url == "test_url"
        assert entry.name == "test_name"
        assert entry.path == "test_path"
        assert entry.content_type is ContentType.DIR
        assert entry.sha == "abc123"
        assert entry.is_dir

    def test_optional_fields_absent(self):
        """Missing download_url and sha are allowed."""
        entry = ContentEntry.from_api_response(
            {"name": "test_name", "path": "test_path", "type": "d"}
        )
        assert entry.download_url is None
        assert entry.sha is None
        assert entry.content_type is ContentType.FILE

    def test_null_download_url(self):
        entry = ContentEntry.from_api_response(
            {"name": "a", "path": "x/a", "type": "dir", "download_url": None}
        )
        assert entry.download_url is None

    @pytest.mark.parametrize(
        "missing,message",
        [("name", "File name"), ("path", "File path"), ("type", "Content type")],
    )
    def test_required_field_missing(self, missing, message):
        data = {"name": "a", "path": "x/a", "type": "file"}
        del data[missing]
        with pytest.raises(GiteaInvalidContentError, match=message):
            ContentEntry.from_api_response(data)

    def test_empty_name_rejected(self):
        with pytest.raises(GiteaInvalidContentError):
            ContentEntry.from_api_response({"name": "", "path": "x", "type": "file"})

    def test_not_an_object(self):
        with pytest.raises(GiteaInvalidContentError, match="content object"):
            ContentEntry.from_api_response(1)

    def test_placeholder(self):
        entry = ContentEntry(name=".gitkeep", path="demo/.gitkeep")
        assert entry.is_placeholder
        assert not ContentEntry(name="app.conf", path="demo/app.conf").is_placeholder


class TestContentListing:
    """Tests for ContentListing.from_api_response."""

    def test_array_preserves_order(self):
        listing = ContentListing.from_api_response(
            [
                {"name": "b", "path": "demo/b", "type": "file"},
                {"name": "a", "path": "demo/a", "type": "dir"},
                {"name": "c", "path": "demo/c", "type": "symlink"},
            ]
        )
        assert listing.names() == ["b", "a", "c"]
        assert [e.content_type for e in listing] == [
            ContentType.FILE,
            ContentType.DIR,
            ContentType.SYMLINK,
        ]

    def test_single_object_wrapped(self):
        listing = ContentListing.from_api_response(
            {"download_url": "u", "name": "n", "path": "p", "type": "file"}
        )
        assert len(listing) == 1
        assert listing.entries[0].path == "p"

    def test_empty_array(self):
        listing = ContentListing.from_api_response([])
        assert listing.is_empty
        assert len(listing) == 0

    def test_array_with_non_object(self):
        with pytest.raises(GiteaInvalidContentError):
            ContentListing.from_api_response([1, 2])

    def test_array_with_malformed_entry(self):
        with pytest.raises(GiteaInvalidContentError, match="File path"):
            ContentListing.from_api_response(
                [
                    {"name": "a", "path": "demo/a", "type": "file"},
                    {"name": "b", "type": "file"},
                ]
            )

    @pytest.mark.parametrize("value", ["text", 42, None, True])
    def test_scalar_top_level(self, value):
        with pytest.raises(GiteaInvalidContentError):
            ContentListing.from_api_response(value)

    def test_type_filter(self):
        listing = ContentListing.from_api_response(
            [
                {"name": "demo", "path": "demo", "type": "dir"},
                {"name": "README.md", "path": "README.md", "type": "file"},
                {"name": "web", "path": "web", "type": "dir"},
            ],
            ContentType.DIR,
        )
        assert listing.names() == ["demo", "web"]

    def test_table_data(self):
        listing = ContentListing(
            entries=[ContentEntry(name="app.conf", path="demo/app.conf")]
        )
        assert listing.to_table_data() == [
            {"name": "app.conf", "type": "File", "path": "demo/app.conf"}
        ]


class TestRepositoryModels:
    """Tests for version, repository and token parsing."""

    def test_version(self):
        version = Version.from_api_response({"version": "1.21.4"})
        assert version.version == "1.21.4"
        assert str(version) == "Gitea version: 1.21.4"

    def test_version_missing_field(self):
        with pytest.raises(GiteaParseError):
            Version.from_api_response({})

    def test_repository(self):
        repo = Repository.from_api_response(
            {
                "id": 3,
                "name": "devops",
                "full_name": "ops/devops",
                "default_branch": "main",
                "permissions": {"admin": False, "pull": True, "push": True},
                "owner": {"id": 1, "login": "ops"},
            }
        )
        assert repo.full_name == "ops/devops"
        assert repo.permissions.push
        assert not repo.permissions.admin
        assert repo.owner.login == "ops"
        assert ("Owner", "ops") in repo.to_summary_items()

    def test_repository_without_name(self):
        with pytest.raises(GiteaParseError):
            Repository.from_api_response([])

    def test_api_token(self):
        token = ApiToken.from_api_response(
            {"id": 5, "name": "pytea", "sha1": "0123456789abcdef", "token_last_eight": "89abcdef"}
        )
        assert token.sha1 == "0123456789abcdef"
        assert "89abcdef" in str(token)
        assert "0123456789abcdef" not in str(token)


class TestFeatureSet:
    """Tests for the FeatureSet value."""

    def test_paths(self):
        feature_set = FeatureSet("demo")
        assert feature_set.root == "demo"
        assert feature_set.scripts_root == "demo/scripts"
        assert feature_set.placeholders == ("demo/.gitkeep", "demo/scripts/.gitkeep")

    def test_surrounding_slashes_stripped(self):
        assert FeatureSet("/demo/").name == "demo"

    @pytest.mark.parametrize("name", ["", "/", "a/b", ".", ".."])
    def test_invalid_names(self, name):
        with pytest.raises(FeatureSetError):
            FeatureSet(name)

    def test_is_script(self):
        feature_set = FeatureSet("demo")
        assert feature_set.is_script("demo/scripts/run.sh")
        assert not feature_set.is_script("demo/app.conf")
        assert not feature_set.is_script("other/scripts/run.sh")

    def test_scripts_prefix_needs_folder(self):
        """Only files inside the scripts folder are scripts."""
        feature_set = FeatureSet("demo")
        assert not feature_set.is_script("demo/scripts.conf")
        assert not feature_set.is_script("demo/scriptsfoo/run.sh")
        assert not feature_set.is_script("demo/scripts")

    def test_relative_and_join(self):
        feature_set = FeatureSet("demo")
        assert feature_set.relative("demo/etc/app.conf") == "/etc/app.conf"
        assert feature_set.join("/etc/app.conf") == "demo/etc/app.conf"
        assert feature_set.join("etc/app.conf") == "demo/etc/app.conf"

    def test_relative_foreign_path(self):
        with pytest.raises(FeatureSetError):
            FeatureSet("demo").relative("demonstration/app.conf")
