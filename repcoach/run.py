import uvicorn

from repcoach.config import config
from repcoach.utils.logging_utils import apply_debug_mode


def main(argv=None):
    config.setup_from_args(argv)
    apply_debug_mode()

    # Display startup information with available command-line options
    print("\n" + "="*60)
    print("RepCoach Workout Engine")
    print("="*60)
    print(f"Mode: {config.mode_description}")
    print(f"Session store: {config.api_base_url}")
    print("\nAvailable modes:")
    print("  repcoach --mode debug         # Debug with frame saving")
    print("  repcoach --mode debug_no_save # Debug without frame saving")
    print("  repcoach --mode non_debug     # Minimal logging only")
    print("="*60 + "\n")

    # Imported after argument parsing so the app title reflects the mode
    from repcoach.main import app

    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
