import json
import os
import tempfile

from restrbac import FileRoleSource, Guard, HotReloader
from restrbac.store import atomic_write


def main() -> None:
    fd, path = tempfile.mkstemp(suffix=".json")
    os.close(fd)

    try:
        allow = {"editor": [{"action": "*", "resource": "posts"}]}
        deny = {"editor": [{"action": "*", "resource": "posts"}, {"type": "deny", "action": "delete", "resource": "posts"}]}

        atomic_write(path, json.dumps(allow))
        guard = Guard()
        reloader = HotReloader(guard, FileRoleSource(path), initial_load=True)
        reloader.poll_once()
        print("first:", guard.authorize_request("editor", "DELETE", "/posts/1").effect)

        atomic_write(path, json.dumps(deny))
        reloader.poll_once()
        print("after:", guard.authorize_request("editor", "DELETE", "/posts/1").effect)

        # a broken document is rejected; the last good roles stay active
        atomic_write(path, "{broken")
        reloader.poll_once()
        print("broken:", guard.authorize_request("editor", "GET", "/posts").effect)
    finally:
        os.remove(path)


if __name__ == "__main__":
    main()
