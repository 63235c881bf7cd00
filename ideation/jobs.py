"""
Run scheduled jobs by hand.

    python -m ideation.jobs recap
"""

import argparse
import asyncio
import logging

from ideation.config import settings
from ideation.services.recap import send_daily_recap


async def main(job: str) -> None:
    if job == "recap":
        summary = await send_daily_recap()
        print(
            f"Recap done: {summary.emails_sent} sent, {summary.emails_failed} failed, "
            f"{summary.recipients_skipped} skipped, {summary.notifications_marked} notifications marked."
        )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run an ideation platform job once.")
    parser.add_argument("job", choices=["recap"])
    args = parser.parse_args()
    logging.basicConfig(level=settings.LOG_LEVEL)
    asyncio.run(main(args.job))
