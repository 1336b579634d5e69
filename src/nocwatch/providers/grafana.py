"""
Grafana-backed metric source.

Queries CloudWatch through the Grafana data-source resource proxy so no AWS
credentials are needed beyond what the Grafana data source already holds.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from nocwatch.providers.base import MetricSourceError, NamespaceHealth

logger = structlog.get_logger()

DEFAULT_USER_AGENT = "nocwatch-metric-source/0.1.0"


class GrafanaMetricSource:
    name = "grafana"

    def __init__(
        self,
        url: str,
        token: str | None,
        datasource_uid: str,
        *,
        timeout: float = 30.0,
        org_id: int | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._base_url = url.rstrip("/")
        self._token = token
        self._datasource_uid = datasource_uid
        self._timeout = timeout
        self._org_id = org_id
        self._user_agent = user_agent

    def dimension_values(
        self,
        namespace: str,
        metric: str,
        dimension_key: str,
        region: str,
    ) -> list[str]:
        data = self._request(
            "GET",
            self._resource_path("dimension-values"),
            params={
                "namespace": namespace,
                "region": region,
                "dimensionKey": dimension_key,
                "metricName": metric,
            },
        )
        values = [item["value"] for item in data or [] if isinstance(item, dict) and item.get("value")]
        logger.debug(
            "dimension_values_fetched",
            namespace=namespace,
            region=region,
            dimension_key=dimension_key,
            count=len(values),
        )
        return values

    def namespace_health(self, namespace: str, region: str) -> NamespaceHealth:
        data = self._request(
            "GET",
            self._resource_path("metrics"),
            params={"namespace": namespace, "region": region},
        )
        metric_count = len(data) if isinstance(data, list) else 0
        return NamespaceHealth(
            namespace=namespace,
            region=region,
            has_metrics=metric_count > 0,
            metric_count=metric_count,
        )

    def _resource_path(self, resource: str) -> str:
        return f"/api/datasources/uid/{self._datasource_uid}/resources/{resource}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self._base_url}{path}"
        headers = kwargs.pop("headers", {}) or {}
        if self._token:
            headers.setdefault("Authorization", f"Bearer {self._token}")
        if self._org_id is not None:
            headers.setdefault("X-Grafana-Org-Id", str(self._org_id))
        headers.setdefault("Accept", "application/json")
        headers.setdefault("User-Agent", self._user_agent)

        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.request(method, url, headers=headers, **kwargs)
                resp.raise_for_status()
                return resp.json() if resp.content else []
        except httpx.HTTPError as exc:
            raise MetricSourceError(
                f"Grafana request failed: {exc}",
                details={"path": path},
            ) from exc
        except ValueError as exc:
            raise MetricSourceError(
                f"Grafana returned invalid JSON: {exc}",
                details={"path": path},
            ) from exc
