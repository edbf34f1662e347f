from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import jwt

ROOT = Path(__file__).resolve().parents[2]
SCRIPT_PATH = ROOT / "scripts" / "issue_dev_token.py"


def _run_script(*args: str, secret: str | None = None) -> subprocess.CompletedProcess[str]:
    env = {key: value for key, value in os.environ.items() if key != "FIELDOPS_JWT_SECRET"}
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(ROOT / "api"), env.get("PYTHONPATH")]))
    if secret is not None:
        env["FIELDOPS_JWT_SECRET"] = secret
    return subprocess.run(
        [sys.executable, str(SCRIPT_PATH), *args],
        capture_output=True,
        text=True,
        env=env,
    )


def test_script_issues_token_with_tenant_claims() -> None:
    completed = _run_script(
        "--user-id",
        "11111111-1111-1111-1111-111111111111",
        "--company-id",
        "aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa",
        "--role",
        "foreman",
        secret="dev-secret",
    )
    assert completed.returncode == 0, completed.stderr

    claims = jwt.decode(completed.stdout.strip(), "dev-secret", algorithms=["HS256"])
    assert claims["userId"] == "11111111-1111-1111-1111-111111111111"
    assert claims["companyId"] == "aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa"
    assert claims["role"] == "foreman"
    assert "exp" in claims


def test_script_requires_a_secret() -> None:
    completed = _run_script("--user-id", "u", "--company-id", "c")
    assert completed.returncode == 2
    assert "FIELDOPS_JWT_SECRET is required" in completed.stderr
