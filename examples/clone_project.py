from dtrack import DTrackClient, ProjectCloneRequest, NotFoundError
import sys
import time

# Example: Cut a new project version by cloning the previous one
#
# This script looks up an existing project version, clones it into a new
# version and, on servers that hand back an event token (4.11.0+), waits
# until the clone has been processed.
#
# Prerequisites:
# 1. A running Dependency-Track API server
# 2. An API key for a team with PORTFOLIO_MANAGEMENT permission
# 3. DTRACK_URL and DTRACK_API_KEY exported in your shell

def run_clone(name: str, from_version: str, to_version: str):
    with DTrackClient() as client:
        print(f"🔗 Connected to {client.base_url} (server {client.detect_server_version()})")

        try:
            source = client.projects.lookup(name, from_version)
        except NotFoundError:
            print(f"❌ No project {name} {from_version}")
            sys.exit(1)

        token = client.projects.clone(ProjectCloneRequest(
            project_uuid=source.uuid,
            version=to_version,
            include_components=True,
            include_properties=True,
            include_tags=True,
            make_clone_latest=True,
        ))

        if token is None:
            print("⚠️  Server is too old to report clone progress; check the UI.")
            return

        print(f"⏳ Clone queued (event token {token})")
        while client.events.is_being_processed(token):
            time.sleep(2)

        clone = client.projects.lookup(name, to_version)
        print(f"✅ Cloned into {clone.name} {clone.version} ({clone.uuid})")

if __name__ == "__main__":
    if len(sys.argv) != 4:
        print("usage: clone_project.py NAME FROM_VERSION TO_VERSION")
        sys.exit(2)
    run_clone(*sys.argv[1:])
