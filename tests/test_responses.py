# tests/test_responses.py
"""
ResponseDocument parsing tests.
"""

import pytest

from app.models.enumerations import Module
from app.scoring.responses import UNANSWERED, LeverResponse, ResponseDocument


class TestLeverResponse:

    @pytest.mark.parametrize(
        "value,present,applicable",
        [
            ({"present": True}, True, True),
            ({"present": False, "applicable": True}, False, True),
            ({"applicable": False}, None, False),
            ({"present": "yes"}, None, True),
            ({"present": 1}, None, True),
            ({}, None, True),
            ("present", None, True),
            (None, None, True),
        ],
    )
    def test_from_value(self, value, present, applicable):
        resp = LeverResponse.from_value(value)
        assert resp.present is present
        assert resp.applicable is applicable

    def test_answered(self):
        assert LeverResponse(present=False).is_answered
        assert LeverResponse(applicable=False).is_answered
        assert not LeverResponse(present=None).is_answered
        assert not UNANSWERED.is_answered


class TestResponseDocument:

    def test_unknown_modules_dropped(self):
        doc = ResponseDocument.from_dict({"telepathy": {"x": {"present": True}}, "inbound": {"seo": {"present": True}}})
        assert [m for m, _ in doc.modules()] == [Module.INBOUND]
        assert doc.is_present(Module.INBOUND, "seo")

    def test_non_mapping_module_dropped(self):
        doc = ResponseDocument.from_dict({"inbound": ["seo"]})
        assert list(doc.modules()) == []

    def test_missing_lever_is_unanswered(self):
        doc = ResponseDocument.from_dict({})
        assert doc.get(Module.PAID, "ppc") is UNANSWERED
        assert doc.is_absent(Module.PAID, "ppc")

    def test_inapplicable_is_not_absent(self):
        doc = ResponseDocument.from_dict({"paid": {"ppc": {"applicable": False}}})
        assert not doc.is_absent(Module.PAID, "ppc")
        assert not doc.is_present(Module.PAID, "ppc")

    def test_round_trip_and_equality(self):
        data = {"infra": {"crm": {"present": True, "applicable": True}}}
        doc = ResponseDocument.from_dict(data)
        assert doc.to_dict() == data
        assert doc == ResponseDocument.from_dict(data)

    def test_immutable(self):
        doc = ResponseDocument()
        with pytest.raises(AttributeError):
            doc.extra = 1
        with pytest.raises(TypeError):
            doc.module(Module.INBOUND)["seo"] = LeverResponse(present=True)
