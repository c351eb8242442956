from app import report_hint
from core.models import AnalysisResult, AnalysisType
from plugins.base_plugin import PluginManager
from plugins.image_plugin import ImageAnalysisPlugin
from plugins.report_plugin import ReportPlugin


def _item(kind: AnalysisType) -> AnalysisResult:
    return AnalysisResult("1", kind, 0.0, "Aspirin", {})


def test_report_hint_waits_for_an_analysis() -> None:
    """Test the sidebar report note."""
    plugins = PluginManager()
    plugins.register_plugin(ImageAnalysisPlugin())
    plugins.register_plugin(ReportPlugin())
    assert report_hint(plugins, []) is None
    assert report_hint(plugins, [_item(AnalysisType.REPORT)]) is None
    assert report_hint(plugins, [_item(AnalysisType.IMAGE)]) == "📊 1 analyses ready for the Research Report."


def test_report_hint_without_report_mode() -> None:
    """Test that a manager without the report mode gives no note."""
    plugins = PluginManager()
    plugins.register_plugin(ImageAnalysisPlugin())
    assert report_hint(plugins, [_item(AnalysisType.IMAGE)]) is None
