"""Unit tests for payload formats."""

import json
import xml.etree.ElementTree as ET

import pytest

from build_notifier.config.models import EndpointConfig, Format
from build_notifier.domain.models import BuildState, JobState, Phase, ScmState, TestState, UserData
from build_notifier.notifications.formats import JsonFormat, XmlFormat, get_format, xml_text
from build_notifier.notifications.models import NotificationConfigurationError
from build_notifier.notifications.snapshot import SnapshotBuilder
from tests.helpers import make_build


@pytest.fixture
def job_state():
    """A completed build with every section filled."""
    return JobState(
        name="app",
        full_name="team/app",
        url="job/team/job/app/",
        build=BuildState(
            number=7,
            url="job/team/job/app/7/",
            full_url="http://ci/job/team/job/app/7/",
            phase=Phase.COMPLETED,
            status="SUCCESS",
            started_at=1000,
            duration=500,
            log="Finished: SUCCESS",
            parameters={"TARGET": "staging"},
            artifacts={"app.jar": {"archive": "http://ci/job/team/job/app/7/artifact/app.jar"}},
            scm=[ScmState(author="alice", commit_id="abc", commit_msg="Fix <bug> & more")],
            test_summary=TestState(total=3, failed=1, failed_tests=["test_login"]),
            user_data=UserData({"owner": "platform"}),
        ),
    )


@pytest.fixture
def started_state():
    """A build that has just started: no status, no root URL."""
    return JobState(
        name="app",
        full_name="app",
        url="job/app/",
        build=BuildState(number=1, url="job/app/1/", phase=Phase.STARTED, started_at=1000),
    )


class TestJsonFormat:
    """Test suite for JsonFormat."""

    def test_round_trips_to_wire_form(self, job_state):
        payload = JsonFormat().serialize(job_state)
        assert json.loads(payload.decode("utf-8")) == job_state.to_wire()

    def test_camel_case_keys(self, job_state):
        data = json.loads(JsonFormat().serialize(job_state))

        assert data["fullName"] == "team/app"
        assert data["build"]["fullUrl"] == "http://ci/job/team/job/app/7/"
        assert data["build"]["finishedAt"] == 1500
        assert data["build"]["scm"][0]["commitId"] == "abc"
        assert data["build"]["testSummary"]["failedTests"] == ["test_login"]
        assert data["build"]["userData"] == {"owner": "platform"}

    def test_absent_fields_omitted(self, started_state):
        data = json.loads(JsonFormat().serialize(started_state))

        assert data["build"]["phase"] == "STARTED"
        assert "status" not in data["build"]
        assert "fullUrl" not in data["build"]
        assert "testSummary" not in data["build"]

    def test_utf8_encoding(self, started_state):
        state = started_state.model_copy(update={"full_name": "équipe/app"})
        payload = JsonFormat().serialize(state)
        assert "équipe".encode("utf-8") in payload


class TestXmlFormat:
    """Test suite for XmlFormat."""

    def test_document_structure(self, job_state):
        payload = XmlFormat().serialize(job_state)
        root = ET.fromstring(payload)

        assert payload.startswith(b"<?xml")
        assert root.tag == "jobState"
        assert root.findtext("fullName") == "team/app"
        assert root.findtext("build/number") == "7"
        assert root.findtext("build/phase") == "COMPLETED"
        assert root.findtext("build/finishedAt") == "1500"

    def test_maps_and_lists(self, job_state):
        root = ET.fromstring(XmlFormat().serialize(job_state))

        entry = root.find("build/parameters/entry")
        assert entry.get("key") == "TARGET"
        assert entry.text == "staging"

        artifact = root.find("build/artifacts/artifact")
        assert artifact.get("name") == "app.jar"
        assert artifact.findtext("archive").endswith("artifact/app.jar")

        assert root.findtext("build/scm/change/commitMsg") == "Fix <bug> & more"
        assert [t.text for t in root.findall("build/testSummary/failedTests/test")] == ["test_login"]
        assert root.find("build/userData/entry").get("key") == "owner"

    def test_absent_fields_omitted(self, started_state):
        root = ET.fromstring(XmlFormat().serialize(started_state))

        assert root.find("build/status") is None
        assert root.find("build/fullUrl") is None
        assert root.find("build/scm") is not None

    def test_console_escapes_stay_well_formed(self):
        build = make_build(console_log="\x1b[32mBUILD SUCCESS\x1b[0m\nline2")
        state = SnapshotBuilder().build(Phase.COMPLETED, build, EndpointConfig(url="http://a/", loglines=-1))

        root = ET.fromstring(get_format(Format.XML).serialize(state))

        assert root.findtext("build/log") == "[32mBUILD SUCCESS[0m\nline2"

    def test_invalid_characters_removed_from_attributes(self, started_state):
        state = started_state.model_copy(
            update={"build": started_state.build.model_copy(update={"user_data": UserData({"k\x00ey": "v\x07al"})})}
        )

        entry = ET.fromstring(XmlFormat().serialize(state)).find("build/userData/entry")

        assert entry.get("key") == "key"
        assert entry.text == "val"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("plain", "plain"),
            ("tab\tok", "tab\tok"),
            ("\x1b[0m", "[0m"),
            ("caf\u00e9 \U0001f680", "caf\u00e9 \U0001f680"),
            (7, "7"),
        ],
    )
    def test_xml_text(self, raw, expected):
        assert xml_text(raw) == expected


class TestGetFormat:
    """Test suite for the format factory."""

    def test_known_formats(self):
        assert isinstance(get_format(Format.JSON), JsonFormat)
        assert isinstance(get_format("XML"), XmlFormat)

    def test_unknown_format(self):
        with pytest.raises(NotificationConfigurationError, match="Unknown format"):
            get_format("YAML")
