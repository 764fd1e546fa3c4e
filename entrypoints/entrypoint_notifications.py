#!/usr/bin/env python3
# entrypoint_notifications.py
"""
Entry point for the notification worker container.
Scale it by running more containers; the queues are shared.
"""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

from main import main


if __name__ == "__main__":
    instance_id = os.getenv("NOTIFICATIONS_INSTANCE_ID", "0")
    print(f"Starting notifications instance #{instance_id}")

    try:
        asyncio.run(main(mode="notifications"))
    except KeyboardInterrupt:
        pass
