"""Tests for the extension base class."""

from pydantic import BaseModel

from conftest import ARTHUR, make_commit
from scm_commit_mcp.extensions import CompositeInput, FilterExtension
from scm_commit_mcp.tools import ListCommitsInput


class HogInput(BaseModel):
    answer: int = 42


class OtherInput(BaseModel):
    question: str = "?"


class HogExtension(FilterExtension):
    namespace = "hog"
    input_model = HogInput


def _composite() -> CompositeInput:
    return CompositeInput(ListCommitsInput(namespace="hitchhiker", name="HeartOfGold"))


class TestGetExtensionInput:
    """Test extracting an extension's own input."""

    def test_returns_correct_input(self):
        composite = _composite()
        composite.add_extension_input("hog", HogInput(answer=42))

        assert HogExtension().get_extension_input(composite) == HogInput(answer=42)

    def test_handles_missing_input(self):
        assert HogExtension().get_extension_input(_composite()) is None

    def test_prevents_wrong_input(self):
        composite = _composite()
        composite.add_extension_input("hog", OtherInput())

        assert HogExtension().get_extension_input(composite) is None

    def test_prevents_foreign_values(self):
        composite = _composite()
        composite.add_extension_input("hog", 42)

        assert HogExtension().get_extension_input(composite) is None

    def test_extension_without_input_model(self):
        class Plain(FilterExtension):
            namespace = "hog"

        composite = _composite()
        composite.add_extension_input("hog", HogInput())

        assert Plain().get_extension_input(composite) is None


class TestDefaults:
    """Test the no-op capabilities."""

    def test_defaults_do_nothing(self):
        extension = FilterExtension()
        commit = make_commit("1", "1985-05-23T21:00:00Z", ARTHUR, "Commit")
        emitted = {}

        assert extension.input_model is None
        assert extension.include_commit(None, commit, _composite()) is True
        assert extension.configure(None, None, _composite()) is None
        extension.enhance_structured_result(None, commit, _composite(), emitted.__setitem__)
        assert emitted == {}


class TestCompositeInput:
    def test_unknown_namespace(self):
        assert _composite().extension_input("nothing") is None

    def test_keeps_base_input(self):
        composite = _composite()
        assert composite.base_input.namespace == "hitchhiker"
        assert composite.base_input.limit == 20
