"""
Tests for resource models.
"""

import pytest

from gpt_trainer.models import (
    Acknowledgment,
    Agent,
    AnalysisContent,
    AnalysisResult,
    Chatbot,
    DataSource,
    DeleteOutcome,
    QAPair,
    UploadedFile,
)


class TestResource:
    """Tests for the shared from_dict / to_dict behavior."""

    def test_unknown_fields_preserved(self):
        agent = Agent.from_dict({"uuid": "ag-1", "name": "Helper", "model": "gpt-4"})
        assert agent.extra == {"model": "gpt-4"}
        assert agent.to_dict() == {"uuid": "ag-1", "name": "Helper", "model": "gpt-4"}

    def test_none_fields_omitted(self):
        assert "description" not in Agent(uuid="ag-1", name="x").to_dict()

    def test_kind(self):
        assert Chatbot.kind == "chatbot"
        assert DataSource.kind == "data_source"


class TestDataSource:
    """Tests for DataSource."""

    def test_qa_pairs_parsed(self):
        source = DataSource.from_dict(
            {
                "uuid": "ds-1",
                "type": "qa",
                "qa_pairs": [{"question": "Q?", "answer": "A."}, "junk"],
                "tags": ["faq", 7],
            }
        )
        assert source.qa_pairs == [QAPair("Q?", "A.")]
        assert source.tags == ["faq", "7"]
        assert source.to_dict()["qa_pairs"] == [{"question": "Q?", "answer": "A."}]

    def test_missing_qa_pairs_stay_none(self):
        source = DataSource.from_dict({"uuid": "ds-2", "type": "url", "url": "https://x.io"})
        assert source.qa_pairs is None
        assert "qa_pairs" not in source.to_dict()


class TestChatbot:
    """Tests for Chatbot and its meta block."""

    @pytest.mark.parametrize(
        "meta,expected",
        [
            ({"visibility": "public"}, "public"),
            ({"visibility": "secret"}, "private"),
            ({}, "private"),
            (None, "private"),
        ],
    )
    def test_visibility_normalized(self, meta, expected):
        data = {"uuid": "cb-1", "name": "Bot"}
        if meta is not None:
            data["meta"] = meta
        assert Chatbot.from_dict(data).meta.visibility == expected

    def test_meta_extra_kept(self, chatbots_response):
        chatbot = Chatbot.from_dict(chatbots_response[0])
        assert chatbot.to_dict()["meta"]["theme"] == "dark"


class TestResults:
    """Tests for acknowledgment and analysis models."""

    def test_acknowledgment_from_non_mapping(self):
        assert Acknowledgment.from_dict(None) == Acknowledgment(success=True)

    def test_acknowledgment_fields(self):
        ack = Acknowledgment.from_dict({"success": False, "message": "nope", "id": 3})
        assert ack.success is False
        assert ack.to_dict() == {"id": 3, "success": False, "message": "nope"}

    def test_delete_outcome_to_dict(self):
        assert DeleteOutcome(False, error="gone").to_dict() == {"success": False, "error": "gone"}
        assert DeleteOutcome(True, "ok").to_dict() == {"success": True, "message": "ok"}

    def test_analysis_result(self, analysis_response):
        result = AnalysisResult.from_dict(analysis_response)
        assert result.summary == analysis_response["summary"]
        assert result.to_dict()["key_points"] == analysis_response["key_points"]

    def test_analysis_result_without_summary(self):
        assert "summary" not in AnalysisResult.from_dict({}).to_dict()

    def test_analysis_content_render(self):
        content = AnalysisContent.from_dict({"title": "T", "content": "Body", "meta": "bad"})
        assert content.render() == "T\n\nBody"
        assert content.meta == {}


class TestUploadedFile:
    """Tests for UploadedFile."""

    def test_genuine_file(self, uploaded_file):
        assert UploadedFile.from_dict(uploaded_file).is_genuine() is True

    def test_missing_file(self, tmp_path):
        upload = UploadedFile(tmp_path / "gone", "gone.txt", "text/plain")
        assert upload.is_genuine() is False

    def test_symlink_rejected(self, uploaded_file, tmp_path):
        link = tmp_path / "link"
        link.symlink_to(uploaded_file["tmp_name"])
        assert UploadedFile(link, "x.txt", "text/plain").is_genuine() is False
