#!/usr/bin/env python3
"""
Smoke Tests for the Destinations service

Quick verification of the critical journeys after a deployment: health,
city CRUD with conditional requests, seasons and the batch import job.
Every record the run creates is deleted again.

Usage:
    python scripts/smoke_test.py [options]

Examples:
    python scripts/smoke_test.py --base-url http://localhost:3001
    python scripts/smoke_test.py --timeout 10 --verbose
"""

import asyncio
import argparse
import sys
import time
import json
import uuid
from typing import Dict, Any, List, Optional
from dataclasses import dataclass
from enum import Enum

import httpx


class TestResult(Enum):
    """Test result status."""
    PASS = "PASS"
    FAIL = "FAIL"


@dataclass
class SmokeTestResult:
    """Individual smoke test result."""
    test_name: str
    status: TestResult
    duration_ms: float
    message: str
    details: Dict[str, Any]
    error: Optional[str] = None


class SmokeTestRunner:
    """Smoke test runner for the Destinations service."""

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        timeout: float = 30,
        verbose: bool = False,
        client: Optional[httpx.AsyncClient] = None,
        job_poll_attempts: int = 50,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.verbose = verbose
        self.job_poll_attempts = job_poll_attempts
        self.results: List[SmokeTestResult] = []
        self.client = client
        self._owns_client = client is None
        self._created_city_ids: List[str] = []

    async def __aenter__(self):
        """Async context manager entry."""
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"User-Agent": "Destinations-SmokeTest/1.0"},
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        for city_id in self._created_city_ids:
            await self.client.delete(f"/cities/{city_id}")
        if self._owns_client:
            await self.client.aclose()

    async def run_all_tests(self) -> Dict[str, Any]:
        """Run all smoke tests."""
        tests = [
            ("Basic Health Check", self.test_health_check),
            ("Readiness", self.test_readiness),
            ("City Lifecycle", self.test_city_lifecycle),
            ("Season Lifecycle", self.test_season_lifecycle),
            ("Batch Import", self.test_batch_import),
            ("Error Handling", self.test_error_handling),
            ("Metrics Endpoint", self.test_metrics),
        ]

        for test_name, test_func in tests:
            await self.run_test(test_name, test_func)

        return self.generate_report()

    async def run_test(self, test_name: str, test_func) -> None:
        """Run individual test with error handling."""
        if self.verbose:
            print(f"Running: {test_name}...")

        start_time = time.perf_counter()
        try:
            result = await test_func()
            test_result = SmokeTestResult(
                test_name=test_name,
                status=TestResult.PASS if result["success"] else TestResult.FAIL,
                duration_ms=(time.perf_counter() - start_time) * 1000,
                message=result["message"],
                details=result.get("details", {}),
                error=result.get("error"),
            )
        except Exception as e:
            test_result = SmokeTestResult(
                test_name=test_name,
                status=TestResult.FAIL,
                duration_ms=(time.perf_counter() - start_time) * 1000,
                message="Test failed with exception",
                details={},
                error=str(e),
            )

        self.results.append(test_result)

        if self.verbose:
            print(f"{test_result.status.value} {test_name} ({test_result.duration_ms:.1f}ms)")
            if test_result.error:
                print(f"   Error: {test_result.error}")

    def _unique_name(self, prefix: str) -> str:
        return f"{prefix} {uuid.uuid4().hex[:8]}"

    async def _create_city(self, name: str) -> Dict[str, Any]:
        response = await self.client.post(
            "/cities", json={"name": name, "country_code": "zz", "currency": "xxx"}
        )
        response.raise_for_status()
        city = response.json()
        self._created_city_ids.append(city["id"])
        return city

    async def test_health_check(self) -> Dict[str, Any]:
        """Test basic liveness endpoint."""
        response = await self.client.get("/health")
        body = response.json()
        if response.status_code == 200 and body.get("status") == "ok":
            return {"success": True, "message": "Health check passed", "details": body}
        return {
            "success": False,
            "message": f"Health check returned status {response.status_code}",
            "details": body,
        }

    async def test_readiness(self) -> Dict[str, Any]:
        """Test the database and job worker readiness report."""
        response = await self.client.get("/health/status")
        body = response.json()
        return {
            "success": response.status_code == 200,
            "message": f"Readiness: {body.get('status')}",
            "details": body.get("services", {}),
        }

    async def test_city_lifecycle(self) -> Dict[str, Any]:
        """Create, read, conditionally update and delete a city."""
        city = await self._create_city(self._unique_name("Smoke City"))
        if city["country_code"] != "ZZ" or city["currency"] != "XXX":
            return {"success": False, "message": "Codes were not normalized", "details": city}

        response = await self.client.get(f"/cities/{city['id']}")
        etag = response.headers.get("ETag")

        cached = await self.client.get(f"/cities/{city['id']}", headers={"If-None-Match": etag})
        if cached.status_code != 304:
            return {"success": False, "message": f"Expected 304, got {cached.status_code}"}

        updated = await self.client.put(
            f"/cities/{city['id']}",
            json={"name": self._unique_name("Smoke City")},
            headers={"If-Match": etag},
        )
        stale = await self.client.put(
            f"/cities/{city['id']}",
            json={"name": self._unique_name("Smoke City")},
            headers={"If-Match": etag},
        )
        if updated.status_code != 200 or stale.status_code != 412:
            return {
                "success": False,
                "message": "Conditional update misbehaved",
                "details": {"update": updated.status_code, "stale_update": stale.status_code},
            }

        deleted = await self.client.delete(f"/cities/{city['id']}")
        self._created_city_ids.remove(city["id"])
        return {
            "success": deleted.status_code == 204,
            "message": "City lifecycle completed",
            "details": {"city_id": city["id"]},
        }

    async def test_season_lifecycle(self) -> Dict[str, Any]:
        """Create a season, list it under its city and delete it."""
        city = await self._create_city(self._unique_name("Smoke Season City"))
        created = await self.client.post(
            "/seasons",
            json={"city_id": city["id"], "season_name": "Peak", "start_month": 11, "end_month": 2},
        )
        if created.status_code != 201:
            return {"success": False, "message": f"Season create returned {created.status_code}"}

        listed = await self.client.get(f"/cities/{city['id']}/seasons")
        names = [season["season_name"] for season in listed.json()["data"]]
        deleted = await self.client.delete(f"/seasons/{created.json()['id']}")
        return {
            "success": names == ["peak"] and deleted.status_code == 204,
            "message": "Season lifecycle completed",
            "details": {"seasons": names},
        }

    async def test_batch_import(self) -> Dict[str, Any]:
        """Submit a small batch and poll its job to completion."""
        cities = [
            {"name": self._unique_name("Smoke Batch"), "country_code": "ZZ", "currency": "XXX"},
            {"name": "", "country_code": "ZZ", "currency": "XXX"},
        ]
        response = await self.client.post("/cities/batch", json={"cities": cities})
        if response.status_code != 202:
            return {"success": False, "message": f"Batch returned {response.status_code}"}

        job_url = response.headers["Location"]
        job: Dict[str, Any] = {}
        for _ in range(self.job_poll_attempts):
            job = (await self.client.get(job_url)).json()
            if job["status"] in ("completed", "failed"):
                break
            await asyncio.sleep(0.1)

        outcomes = job.get("result") or []
        self._created_city_ids.extend(
            outcome["id"] for outcome in outcomes if outcome["status"] == "created"
        )
        statuses = [outcome["status"] for outcome in outcomes]
        return {
            "success": job.get("status") == "completed" and statuses == ["created", "failed"],
            "message": f"Batch job finished as {job.get('status')}",
            "details": {"outcomes": statuses},
        }

    async def test_error_handling(self) -> Dict[str, Any]:
        """Unknown resources and bad input map to 404 and 400."""
        missing = await self.client.get(f"/cities/{uuid.uuid4()}")
        invalid = await self.client.post("/cities", json={"name": "No Codes"})
        return {
            "success": missing.status_code == 404 and invalid.status_code == 400,
            "message": "Error responses checked",
            "details": {"missing": missing.status_code, "invalid": invalid.status_code},
        }

    async def test_metrics(self) -> Dict[str, Any]:
        """Test the Prometheus exposition endpoint."""
        response = await self.client.get("/metrics")
        return {
            "success": response.status_code == 200 and "http_requests_total" in response.text,
            "message": f"Metrics endpoint returned {response.status_code}",
        }

    def generate_report(self) -> Dict[str, Any]:
        """Generate test report."""
        total_tests = len(self.results)
        passed_tests = sum(1 for r in self.results if r.status == TestResult.PASS)

        return {
            "success_rate": (passed_tests / total_tests) * 100 if total_tests > 0 else 0,
            "summary": {
                "total_tests": total_tests,
                "passed": passed_tests,
                "failed": total_tests - passed_tests,
            },
            "results": [
                {
                    "test_name": r.test_name,
                    "status": r.status.value,
                    "duration_ms": r.duration_ms,
                    "message": r.message,
                    "error": r.error,
                }
                for r in self.results
            ],
            "failed_tests": [r.test_name for r in self.results if r.status == TestResult.FAIL],
        }


async def main() -> int:
    """Main function to run smoke tests."""
    parser = argparse.ArgumentParser(description="Destinations service smoke tests")
    parser.add_argument("--base-url", default="http://localhost:3001", help="Base URL for API")
    parser.add_argument("--timeout", type=float, default=30, help="Request timeout in seconds")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--output", help="Output file for results (JSON)")

    args = parser.parse_args()

    async with SmokeTestRunner(
        base_url=args.base_url,
        timeout=args.timeout,
        verbose=args.verbose,
    ) as runner:
        report = await runner.run_all_tests()

    summary = report["summary"]
    print(f"Tests Passed: {summary['passed']}/{summary['total_tests']}")
    if report["failed_tests"]:
        print(f"Failed Tests: {', '.join(report['failed_tests'])}")

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(report, f, indent=2)
        print(f"Results saved to: {args.output}")

    return 1 if report["failed_tests"] else 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nSmoke tests interrupted")
        sys.exit(130)
