#!/usr/bin/env python3
from __future__ import annotations

import argparse
import importlib
import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import httpx


@dataclass
class Scenario:
  name: str
  file_name: str
  payload: bytes
  mime_type: str
  expected_medicines: list[str] = field(default_factory=list)
  expected_exercises: list[str] = field(default_factory=list)
  expected_heart_rate: str | None = None


def in_process_client() -> Any:
  from fastapi.testclient import TestClient

  repo_root = Path(__file__).resolve().parents[1]
  backend_dir = repo_root / "backend"
  if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

  backend_module = importlib.import_module("main")
  backend_module = importlib.reload(backend_module)
  return TestClient(backend_module.app)


def run_scenario(client: Any, scenario: Scenario, session_key: str) -> dict[str, Any]:
  headers = {"X-Session-Id": session_key}
  result: dict[str, Any] = {"name": scenario.name, "session": session_key}

  upload = client.post(
    "/api/reports/upload",
    headers=headers,
    files={"file": (scenario.file_name, scenario.payload, scenario.mime_type)},
  )
  result["upload_status_code"] = upload.status_code
  if upload.status_code != 200:
    result["pass"] = False
    result["error"] = f"/api/reports/upload returned {upload.status_code}"
    return result

  summary = client.get("/api/reports/summary", headers=headers).json().get("summary") or {}
  medicines = client.post("/api/medicines/generate", headers=headers).json().get("items", [])
  exercises = client.post("/api/fitness/generate", headers=headers).json().get("exercises", [])

  result["summary"] = summary
  result["medicines"] = [item.get("name") for item in medicines]
  result["exercises"] = [item.get("name") for item in exercises]

  errors: list[str] = []
  heart_rate = (summary.get("vitalSigns") or {}).get("heartRate")
  if scenario.expected_heart_rate is not None and heart_rate != scenario.expected_heart_rate:
    errors.append(f"Expected heart rate {scenario.expected_heart_rate}, got {heart_rate!r}")
  if result["medicines"] != scenario.expected_medicines:
    errors.append(f"Expected medicines {scenario.expected_medicines}, got {result['medicines']}")
  if result["exercises"] != scenario.expected_exercises:
    errors.append(f"Expected exercises {scenario.expected_exercises}, got {result['exercises']}")

  result["pass"] = not errors
  if errors:
    result["error"] = "; ".join(errors)
  return result


def run() -> int:
  parser = argparse.ArgumentParser(description="Upload sample reports and check summaries and recommendations.")
  parser.add_argument("--base-url", help="Run against a live server instead of an in-process app.")
  parser.add_argument("--report", default="ELDERCARE_SMOKE_REPORT.md", help="Markdown report path.")
  args = parser.parse_args()

  scenarios = [
    Scenario(
      name="Vitals Page Report",
      file_name="vitals.txt",
      payload=b"Heart Rate: 101 bpm\nBlood Pressure: 142/91\nSteps: 3,210\n",
      mime_type="text/plain",
      expected_medicines=["Lisinopril"],
      expected_exercises=["Seated Marching", "Chair Squats"],
      expected_heart_rate="101",
    ),
    Scenario(
      name="Free Text Conditions",
      file_name="notes.txt",
      payload=b"patient has hypertension and diabetes with elevated ldl",
      mime_type="text/plain",
      expected_medicines=["Lisinopril", "Atorvastatin"],
      expected_exercises=["Seated Marching", "Wall Push-ups", "Chair Squats"],
      expected_heart_rate="72",
    ),
    Scenario(
      name="Lab Table",
      file_name="labs.csv",
      payload=b"Glucose,180\nPulse,58\n",
      mime_type="text/csv",
      expected_medicines=["Wellness Tablet"],
      expected_exercises=["Wall Push-ups", "Chair Squats"],
      expected_heart_rate="58",
    ),
  ]

  stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
  results: list[dict[str, Any]] = []

  client = httpx.Client(base_url=args.base_url, timeout=30.0) if args.base_url else in_process_client()
  with client:
    for idx, scenario in enumerate(scenarios):
      try:
        results.append(run_scenario(client, scenario, f"smoke-{stamp}-{idx}"))
      except httpx.HTTPError as exc:
        results.append({"name": scenario.name, "pass": False, "error": f"Request failed: {exc}"})

  passed = sum(1 for item in results if item.get("pass"))
  failed = len(results) - passed
  timestamp = datetime.now(timezone.utc).isoformat()

  report_lines = [
    "# Eldercare Smoke Report",
    "",
    f"- Timestamp (UTC): `{timestamp}`",
    f"- Target: `{args.base_url or 'in-process'}`",
    f"- Total scenarios: `{len(results)}`",
    f"- Passed: `{passed}`",
    f"- Failed: `{failed}`",
    "",
    "## Scenario Results",
    "",
  ]

  for item in results:
    status = "PASS" if item.get("pass") else "FAIL"
    report_lines.append(f"### {status} - {item['name']}")
    report_lines.append(f"- Upload status code: `{item.get('upload_status_code')}`")
    report_lines.append(f"- Medicines: `{item.get('medicines')}`")
    report_lines.append(f"- Exercises: `{item.get('exercises')}`")
    if item.get("error"):
      report_lines.append(f"- Error: `{item['error']}`")
    report_lines.append("- Summary payload:")
    report_lines.append("```json")
    report_lines.append(json.dumps(item.get("summary"), indent=2, ensure_ascii=True))
    report_lines.append("```")
    report_lines.append("")

  report_path = Path(args.report).resolve()
  report_path.write_text("\n".join(report_lines), encoding="utf-8")
  print(f"Wrote report: {report_path}")
  print(f"Passed {passed}/{len(results)} scenarios.")

  return 0 if failed == 0 else 1


if __name__ == "__main__":
  raise SystemExit(run())
