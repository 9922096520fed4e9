from __future__ import annotations

from datetime import UTC, datetime, timedelta

from cloudhop.core.deployment_service import (
    AnalyticsReport,
    CostComparison,
    DeploymentListing,
    DeployOutcome,
    PlatformFailure,
)
from cloudhop.mcp.tools.formatting import (
    format_analytics,
    format_cost_comparison,
    format_deployment,
    format_listing,
    format_status,
)
from cloudhop.models.deployment import DeploymentResult, DeploymentStatus, Platform, PlatformAnalytics

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _result(**overrides: object) -> DeploymentResult:
    values: dict[str, object] = {
        "platform": Platform.VERCEL,
        "deployment_id": "dpl_abcdefghijklmnop",
        "url": "https://my-app.vercel.app",
        "status": DeploymentStatus.BUILDING,
        "region": "iad1",
        "timestamp": NOW - timedelta(hours=1, minutes=2, seconds=3),
    }
    values.update(overrides)
    return DeploymentResult(**values)  # type: ignore[arg-type]


def test_deployment_summary_lists_core_fields() -> None:
    text = format_deployment(DeployOutcome(result=_result(build_time=1234), team_id="team_1", shared=True))

    for line in (
        "Platform: vercel",
        "Deployment ID: dpl_abcdefghijklmnop",
        "URL: https://my-app.vercel.app",
        "Status: building",
        "Region: iad1",
        "Build Time: 1234ms",
        "Shared with team: team_1",
    ):
        assert line in text


def test_deployment_summary_reports_failed_share() -> None:
    text = format_deployment(DeployOutcome(result=_result(), team_id="team_1", shared=False))

    assert "Could not share with team: team_1" in text
    assert "Shared with team" not in text


def test_status_summary_omits_missing_build_time() -> None:
    text = format_status(_result(region=None))
    assert "Build Time" not in text
    assert "Region: unknown" in text
    assert "Last Updated: 2026-03-01T10:57:57+00:00" in text


def test_listing_rows_show_age_and_short_id() -> None:
    listing = DeploymentListing(deployments=[_result()], total=4, failures=[PlatformFailure(Platform.RAILWAY, "Not authenticated")])

    text = format_listing(listing, now=NOW)

    assert text.startswith("Recent Deployments (1/4)")
    assert "[building] | VERCEL | dpl_abcdefgh... | https://my-app.vercel.app | 01:02:03 ago" in text
    assert text.endswith("Platform Errors:\nrailway: Not authenticated")


def test_empty_listing_names_platform_filter() -> None:
    text = format_listing(DeploymentListing(deployments=[], total=0, platform=Platform.CLOUDFLARE))
    assert text == "No deployments found on cloudflare."


def test_cost_comparison_renders_error_line_inline() -> None:
    comparison = CostComparison(
        project_name="my-app",
        analytics=[
            PlatformAnalytics(
                platform=Platform.CLOUDFLARE,
                project_name="my-app",
                total_cost=1.5,
                performance_score=95,
                average_build_time=2400,
                success_rate=0.75,
            )
        ],
        failures=[PlatformFailure(Platform.VERCEL, "RuntimeError: down")],
        order=[Platform.CLOUDFLARE, Platform.VERCEL],
    )

    text = format_cost_comparison(comparison)

    assert "Estimated Cost: $1.50/month" in text
    assert "Performance Score: 95/100" in text
    assert "Avg Build Time: 2s" in text
    assert "Success Rate: 75%" in text
    assert "vercel: error getting data - RuntimeError: down" in text
    assert "- railway:" not in text


def test_analytics_summary_totals() -> None:
    report = AnalyticsReport(
        project_name="my-app",
        analytics=[
            PlatformAnalytics(platform=Platform.VERCEL, project_name="my-app", total_deployments=3, success_rate=1.0, total_cost=2, performance_score=100),
            PlatformAnalytics(platform=Platform.RAILWAY, project_name="my-app", total_deployments=1, success_rate=0.5, total_cost=1, performance_score=45),
        ],
    )

    text = format_analytics(report)

    assert "- Total Deployments: 4" in text
    assert "- Average Success Rate: 75%" in text
    assert "- Total Monthly Cost: $3.00" in text
    assert "- Platforms Active: 2" in text
    assert text.endswith("Best Performing Platform: VERCEL")
