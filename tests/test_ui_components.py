from unittest.mock import MagicMock, patch

from core.models import AnalysisResult, AnalysisType
from src.ui_components import (
    badge,
    comparison_frame,
    confidence_badge,
    report_markdown,
    show_history,
    show_therapeutic_predictions,
)


def test_report_markdown() -> None:
    """Test the downloadable report text."""
    report = {
        "reports": [
            {
                "domainName": "Pharmacology",
                "title": "**Salicylates**",
                "introduction": "Two NSAIDs were compared.",
                "keyInsights": "Acetylation matters.",
                "limitations": "",
            }
        ],
        "globalSafetyNotice": "Hypotheses only.",
    }
    text = report_markdown(report)
    assert text.startswith("# NovaSynth Research Insight Report\n")
    assert "## Pharmacology: Salicylates" in text
    assert "### Introduction\nTwo NSAIDs were compared." in text
    assert "### Limitations" not in text
    assert text.rstrip().endswith("**Safety notice:** Hypotheses only.")


def test_report_markdown_empty() -> None:
    """Test a report with no sections."""
    assert report_markdown({}) == "# NovaSynth Research Insight Report\n"


def test_comparison_frame() -> None:
    """Test the comparison matrix table."""
    frame = comparison_frame(
        [{"feature": "LogP", "val1": "1.2", "val2": "3.9", "trend": "Positive"}, "junk"],
        "Aspirin",
        "Ibuprofen",
    )
    assert list(frame.columns) == ["Feature", "Aspirin", "Ibuprofen", "Trend"]
    assert frame.iloc[0]["Ibuprofen"] == "3.9"
    assert frame.iloc[0]["Trend"] == "📈 Positive"


def test_comparison_frame_empty() -> None:
    """Test a missing matrix."""
    assert comparison_frame(None, "A", "B").empty


def test_confidence_badge_defaults_to_medium() -> None:
    """Test unknown confidence levels."""
    assert "Medium Confidence" in confidence_badge("Certain")
    assert "High Confidence" in confidence_badge("High")


def test_badge_escapes_model_text() -> None:
    """Test badge markup and escaping."""
    assert badge("Pharmacology", accent=True) == "<span class='novasynth-badge accent'>Pharmacology</span>"
    assert badge(None, fallback="N/A") == "<span class='novasynth-badge'>N/A</span>"
    assert "<b>" not in badge("C<b>6</b>H6") and "C&lt;b&gt;6&lt;/b&gt;H6" in badge("C<b>6</b>H6")


@patch("src.ui_components.st")
def test_therapeutic_predictions_escape_model_text(mock_st: MagicMock) -> None:
    """Test that prediction text cannot inject markup."""
    show_therapeutic_predictions(
        [{"class": "<script>x</script>", "explanation": "a < b", "confidence": "High"}], "<i>Aspirin</i>"
    )
    html = "".join(c.args[0] for c in mock_st.markdown.call_args_list)
    assert "<script>" not in html and "<i>" not in html
    assert "&lt;script&gt;x&lt;/script&gt;" in html
    assert "a &lt; b" in html and "&lt;i&gt;Aspirin&lt;/i&gt;" in html


@patch("src.ui_components.st")
def test_history_escapes_titles(mock_st: MagicMock) -> None:
    """Test the sidebar history entries."""
    show_history([AnalysisResult("1", AnalysisType.IMAGE, 0.0, "<img src=x>", {}, domain_tag="<b>Chem</b>")])
    entry = mock_st.sidebar.markdown.call_args.args[0]
    assert "&lt;img src=x&gt;" in entry and "&lt;b&gt;Chem&lt;/b&gt;" in entry
    assert "<img" not in entry
