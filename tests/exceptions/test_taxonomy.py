"""Tests for the error taxonomy and fatal exceptions."""

from pathlib import Path

import pytest

from layerguard.exceptions import (
    ContractConfigError,
    ErrorCode,
    EvaluationError,
    GuardIssue,
    InvalidConfigError,
    LayerAmbiguityError,
    LayerguardError,
    ParseWarning,
    ScanError,
    SourceParseError,
    SymlinkCycleWarning,
    UnmatchedIgnoreWarning,
    UnresolvedImportWarning,
)


class TestErrorCode:
    """Test ErrorCode enum."""

    def test_scanning_codes(self):
        """Scanning issues are LG1xx."""
        assert ErrorCode.LG101.value == "LG101"  # Parse failure
        assert ErrorCode.LG102.value == "LG102"  # Unresolved import
        assert ErrorCode.LG103.value == "LG103"  # Symlink cycle

    def test_contract_codes(self):
        """Contract issues are LG2xx."""
        assert ErrorCode.LG201.value == "LG201"
        assert ErrorCode.LG202.value == "LG202"

    def test_evaluation_codes(self):
        """Evaluation issues are LG3xx."""
        assert ErrorCode.LG301.value == "LG301"


class TestGuardIssue:
    """Test the collected-issue base class."""

    @pytest.mark.parametrize(
        "cls, code",
        [
            (ParseWarning, ErrorCode.LG101),
            (UnresolvedImportWarning, ErrorCode.LG102),
            (SymlinkCycleWarning, ErrorCode.LG103),
            (LayerAmbiguityError, ErrorCode.LG201),
            (UnmatchedIgnoreWarning, ErrorCode.LG202),
            (EvaluationError, ErrorCode.LG301),
        ],
    )
    def test_default_codes(self, cls, code):
        issue = cls("something happened")
        assert issue.code is code
        assert isinstance(issue, GuardIssue)
        assert isinstance(issue, Exception)

    def test_str_includes_code(self):
        assert str(ParseWarning("bad file")) == "[LG101] bad file"

    def test_can_be_raised(self):
        with pytest.raises(LayerAmbiguityError) as exc_info:
            raise LayerAmbiguityError("x in two layers", context={"module": "x"})
        assert exc_info.value.context == {"module": "x"}

    def test_recoverable(self):
        assert ParseWarning("x").recoverable
        assert not EvaluationError("x").recoverable

    def test_to_json(self):
        issue = UnresolvedImportWarning("app.a references app.b", context={"module": "app.a"})
        assert issue.to_json() == {
            "kind": "UnresolvedImportWarning",
            "code": "LG102",
            "message": "app.a references app.b",
            "context": {"module": "app.a"},
            "recovery_hint": issue.recovery_hint,
        }
        assert issue.recovery_hint

    def test_context_not_shared(self):
        a, b = ParseWarning("a"), ParseWarning("b")
        a.context["x"] = 1
        assert b.context == {}


class TestFatalErrors:
    """Test the fatal exception hierarchy."""

    def test_keyword_details(self):
        error = LayerguardError("boom", path=Path("a/b"), line=3, hint=None)
        assert error.details == {"path": "a/b", "line": "3"}
        assert str(error) == "boom (path=a/b, line=3)"
        assert str(LayerguardError("plain")) == "plain"

    def test_scan_error(self):
        error = ScanError(Path("/nope"), "directory does not exist")
        assert isinstance(error, LayerguardError)
        assert error.reason == "directory does not exist"
        assert "Cannot scan /nope" in str(error)
        assert "reason=directory does not exist" in str(error)

    def test_contract_config_error(self):
        error = ContractConfigError("bad type", contract="c1", source=Path("lg.toml"))
        assert str(error) == "Invalid contract 'c1' (reason=bad type, contract=c1, source=lg.toml)"

    def test_contract_config_error_without_contract(self):
        error = ContractConfigError("no contracts defined")
        assert str(error) == "Invalid contract configuration (reason=no contracts defined)"

    def test_invalid_config_error(self):
        error = InvalidConfigError("workers", 0, "workers must be at least 1")
        assert isinstance(error, ContractConfigError)
        assert error.key == "workers"
        assert str(error).startswith("Invalid configuration for workers: 0")

    def test_source_parse_error(self):
        error = SourceParseError("app.x", "python", "invalid syntax", line=3)
        assert error.line == 3
        assert error.details["line"] == "3"
