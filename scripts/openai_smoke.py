"""
Minimal one-call smoke test to verify OpenAI access through the structured invoker.

Usage:
  export OPENAI_API_KEY=your_key
  uv run python scripts/openai_smoke.py --model gpt-4o-mini
"""
import argparse
import asyncio
import os
import sys
from pathlib import Path

# Ensure repository root is on sys.path for local execution.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from llm.client import OpenAIClient
from llm.invoker import PromptInvoker
from llm.operations import RESUME_FIT

SAMPLE_RESUME = (
    "Data analyst with four years of experience building SQL reports and "
    "Python dashboards for a retail company."
)
SAMPLE_JOB = (
    "We are hiring a data analyst who writes SQL daily, automates reporting "
    "in Python, and presents findings to stakeholders."
)


def main():
    parser = argparse.ArgumentParser(description="OpenAI API smoke test (single structured call).")
    parser.add_argument("--model", default="gpt-4o-mini", help="Model name to test.")
    args = parser.parse_args()

    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise SystemExit("Set OPENAI_API_KEY before running this script.")

    invoker = PromptInvoker(OpenAIClient(api_key=api_key, model=args.model))
    fit = asyncio.run(
        RESUME_FIT.run(invoker, {"resume": SAMPLE_RESUME, "job_description": SAMPLE_JOB})
    )
    print("Fit score:", fit.fit_score)
    print("Feedback:", fit.feedback)


if __name__ == "__main__":
    main()
