"""Plain-text renderings of tool results."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from cloudhop.core.deployment_service import (
    AnalyticsReport,
    CostComparison,
    DeploymentListing,
    DeployOutcome,
    PlatformFailure,
)
from cloudhop.models.deployment import DeploymentResult, Platform, PlatformAnalytics

_RECOMMENDATIONS: dict[Platform, str] = {
    Platform.CLOUDFLARE: "Best for static sites and edge computing (generous free tier)",
    Platform.VERCEL: "Best for Next.js and React apps",
    Platform.RAILWAY: "Best for full-stack apps with databases (simple pricing)",
}


def format_authenticated(platform: Platform) -> str:
    return f"Successfully authenticated with {platform.value}"


def format_deployment(outcome: DeployOutcome) -> str:
    result = outcome.result
    lines = ["Deployment started", "", *_result_lines(result)]
    if outcome.team_id and outcome.shared:
        lines.append(f"Shared with team: {outcome.team_id}")
    elif outcome.team_id:
        lines.append(f"Could not share with team: {outcome.team_id}")
    lines += [
        "",
        f"Use 'deployment-status' with platform '{result.platform.value}' and "
        f"deploymentId '{result.deployment_id}' to follow progress.",
    ]
    return "\n".join(lines)


def format_status(result: DeploymentResult) -> str:
    lines = ["Deployment Status", "", *_result_lines(result)]
    lines.append(f"Last Updated: {result.timestamp.isoformat()}")
    return "\n".join(lines)


def format_cost_comparison(comparison: CostComparison) -> str:
    by_platform = {item.platform: item for item in comparison.analytics}
    failures = {failure.platform: failure for failure in comparison.failures}
    blocks: list[str] = []
    for platform in comparison.order:
        if platform in by_platform:
            data = by_platform[platform]
            blocks.append(
                "\n".join(
                    [
                        f"{platform.value}:",
                        f"  Estimated Cost: ${data.total_cost:.2f}/month",
                        f"  Performance Score: {data.performance_score:g}/100",
                        f"  Avg Build Time: {round(data.average_build_time / 1000)}s",
                        f"  Success Rate: {round(data.success_rate * 100)}%",
                    ]
                )
            )
        elif platform in failures:
            failure = failures[platform]
            if failure.message == "Not authenticated":
                blocks.append(f"{platform.value}: Not authenticated")
            else:
                blocks.append(f"{platform.value}: error getting data - {failure.message}")

    recommendations = [f"- {platform.value}: {_RECOMMENDATIONS[platform]}" for platform in comparison.order]
    return "\n".join(
        [
            f'Cost Comparison for "{comparison.project_name}"',
            "",
            "\n\n".join(blocks),
            "",
            "Recommendations:",
            *recommendations,
        ]
    )


def format_listing(listing: DeploymentListing, *, now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    if not listing.deployments:
        where = f" on {listing.platform.value}" if listing.platform else ""
        text = f"No deployments found{where}."
        if listing.failures:
            text += "\n\nErrors:\n" + _failure_lines(listing.failures)
        return text

    rows = [
        " | ".join(
            [
                f"[{item.status.value}]",
                item.platform.value.upper(),
                _short_id(item.deployment_id),
                item.url,
                f"{_age(now, item.timestamp)} ago",
            ]
        )
        for item in listing.deployments
    ]
    text = f"Recent Deployments ({len(listing.deployments)}/{listing.total})\n\n" + "\n".join(rows)
    if listing.failures:
        text += "\n\nPlatform Errors:\n" + _failure_lines(listing.failures)
    return text


def format_analytics(report: AnalyticsReport) -> str:
    if not report.analytics:
        return (
            f'No analytics data found for project "{report.project_name}". '
            "Make sure you are authenticated with the platforms and have deployments."
        )

    blocks = [_analytics_block(item) for item in report.analytics]
    count = len(report.analytics)
    total_deployments = sum(item.total_deployments for item in report.analytics)
    total_cost = sum(item.total_cost for item in report.analytics)
    average_success = sum(item.success_rate for item in report.analytics) / count
    best = report.best_performer

    lines = [
        f'Analytics Report for "{report.project_name}"',
        "",
        "\n\n".join(blocks),
        "",
        "SUMMARY",
        f"- Total Deployments: {total_deployments}",
        f"- Average Success Rate: {round(average_success * 100)}%",
        f"- Total Monthly Cost: ${total_cost:.2f}",
        f"- Platforms Active: {count}",
        "",
        f"Best Performing Platform: {best.platform.value.upper() if best else 'N/A'}",
    ]
    if report.failures:
        lines += ["", "Platform Errors:", _failure_lines(report.failures)]
    return "\n".join(lines)


def _analytics_block(data: PlatformAnalytics) -> str:
    lines = [
        data.platform.value.upper(),
        f"- Total Deployments: {data.total_deployments}",
        f"- Success Rate: {round(data.success_rate * 100)}%",
        f"- Avg Build Time: {round(data.average_build_time / 1000)}s",
        f"- Monthly Cost: ${data.total_cost:.2f}",
        f"- Performance Score: {data.performance_score:g}/100",
    ]
    if data.last_deployment is not None:
        lines.append(f"- Last Deploy: {data.last_deployment.date().isoformat()}")
    return "\n".join(lines)


def _result_lines(result: DeploymentResult) -> list[str]:
    lines = [
        f"Platform: {result.platform.value}",
        f"Deployment ID: {result.deployment_id}",
        f"URL: {result.url}",
        f"Status: {result.status.value}",
        f"Region: {result.region or 'unknown'}",
    ]
    if result.build_time is not None:
        lines.append(f"Build Time: {result.build_time}ms")
    return lines


def _failure_lines(failures: Sequence[PlatformFailure]) -> str:
    return "\n".join(f"{failure.platform.value}: {failure.message}" for failure in failures)


def _short_id(deployment_id: str) -> str:
    return deployment_id if len(deployment_id) <= 12 else f"{deployment_id[:12]}..."


def _age(now: datetime, then: datetime) -> str:
    seconds = max(int((now - then).total_seconds()), 0)
    hours, remainder = divmod(seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
