import platform
import sys


def tracert_entry() -> None:
    from tracert.printing import wprint

    supported_platforms = ["Linux", "Darwin"]
    current_platform = platform.system()
    if current_platform not in supported_platforms:
        wprint(f"tracert has not been tested on '{current_platform}'")

    python_version = sys.version.split()[0]
    if sys.version_info < (3, 12):
        from tracert.printing import eprint
        eprint(f"tracert requires python 3.12+, used version {python_version}")

    from tracert.configure import configure, is_configured
    if not is_configured():
        configure()

    from tracert.main import main
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    tracert_entry()
