from __future__ import annotations

from typing import Any, Optional

from services.api_client import ApiClient
from services.models import CrawlJob, CrawlStats, JobLog


RUN_ENDPOINTS = {
    "dmx": "/crawler/run",
    "tgdd": "/crawler/run-tgdd",
    "tgdd-laptop": "/crawler/run-tgdd-laptop",
}


def get_crawl_jobs(
    api: ApiClient,
    *,
    source: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> tuple[list[CrawlJob], int]:
    """Returns ``(jobs, total_pages)``."""
    res = api.root.get(
        "/crawler/jobs",
        params={"source": source, "category": category, "status": status, "page": page, "limit": limit},
    ) or {}
    data = res.get("data") or {}
    jobs = [CrawlJob.from_dict(j) for j in data.get("jobs") or [] if isinstance(j, dict)]
    total_pages = int((data.get("pagination") or {}).get("totalPages") or 1)
    return jobs, max(1, total_pages)


def get_crawl_job_detail(api: ApiClient, job_id: str) -> CrawlJob:
    res = api.root.get(f"/crawler/jobs/{job_id}") or {}
    return CrawlJob.from_dict(res.get("data") or {})


def get_crawl_job_logs(api: ApiClient, job_id: str, limit: Optional[int] = None) -> list[JobLog]:
    res = api.root.get(f"/crawler/jobs/{job_id}/logs", params={"limit": limit}) or {}
    return [JobLog.from_dict(entry) for entry in (res.get("data") or {}).get("logs") or [] if isinstance(entry, dict)]


def cancel_crawl_job(api: ApiClient, job_id: str) -> dict[str, Any]:
    return api.root.post(f"/crawler/jobs/{job_id}/cancel")


def get_crawl_stats(api: ApiClient) -> CrawlStats:
    res = api.root.get("/crawler/stats") or {}
    return CrawlStats.from_dict(res.get("data"))


def run_crawler(api: ApiClient, kind: str) -> dict[str, Any]:
    endpoint = RUN_ENDPOINTS.get(kind)
    if endpoint is None:
        raise ValueError(f"Unknown crawler kind: {kind!r}")
    return api.root.post(endpoint)
