"""Example: restoring dependencies from a CI script without the CLI.

Reads CACHE_S3_BUCKET / AWS_* from the environment. With caching disabled
the packages are simply installed.
"""

import sys
from pathlib import Path

from depcache import InstallFailedError, create_orchestrator, create_service
from depcache.core import ThreadSaveDispatcher

service = create_service()
dispatcher = ThreadSaveDispatcher(service)
orchestrator = create_orchestrator(service, dispatcher)

project = Path(sys.argv[1] if len(sys.argv) > 1 else ".")

try:
    for summary in orchestrator.bootstrap(project):
        print(f"{summary.ecosystem}: {summary.outcome.value} in {summary.duration:.1f}s")
except InstallFailedError as e:
    print(f"Error: {e}", file=sys.stderr)
    sys.exit(1)

# Run the tests here; the upload keeps going in the background.

dispatcher.wait(timeout=service.config.timeout)
dispatcher.shutdown()
