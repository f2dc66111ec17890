# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKTRACK_APP_NAME": "App display name (default: tasktrack).",
    "TASKTRACK_LOG_LEVEL": "Console logging level (default: INFO; console shows WARNING+ at least).",
    # Paths (gitignored)
    "TASKTRACK_DATA_DIR": "Local data directory (default: .local/tasktrack).",
    "TASKTRACK_TASKS_FILE": "Task JSON file (default: <data_dir>/tasks.json).",
    "TASKTRACK_LOG_DIR": "Directory for tasktrack.log and audit.log (default: <data_dir>).",
    # Cache
    "TASKTRACK_CACHE_ENABLED": "Enable the in-process read cache (true/false, default: true).",
    "TASKTRACK_CACHE_TTL_SECONDS": "TTL for single-task cache entries (default: 300).",
    "TASKTRACK_LIST_CACHE_TTL_SECONDS": "TTL for list/search cache entries (default: 60).",
    # Audit
    "TASKTRACK_ACTOR": "Name recorded in audit entries (default: OS user name).",
}
