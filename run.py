# run.py
import os
try:
    from dotenv import load_dotenv
except ImportError:
    load_dotenv = None  # type: ignore
import uvicorn

if load_dotenv is not None:
    load_dotenv(override=True)


def run_server(port: int, reload: bool = True):
    """Start uvicorn, retrying without reload if the watcher lacks permission."""
    try:
        uvicorn.run("ttm_coach.api:app", host="0.0.0.0", port=port, reload=reload)
    except (PermissionError, OSError) as exc:
        err_no = getattr(exc, "errno", None)
        if reload and err_no == 1:
            print("ℹ️  Reload watcher not permitted; restarting server without reload.")
            uvicorn.run("ttm_coach.api:app", host="0.0.0.0", port=port, reload=False)
        else:
            raise


if __name__ == "__main__":
    server_port = int(os.getenv("DEV_SERVER_PORT") or 8000)
    reload_pref = os.getenv("UVICORN_RELOAD", "true").strip().lower() not in {"0", "false", "no"}
    print(f"[run] ttm_coach.api on port {server_port} (reload={reload_pref})")
    run_server(server_port, reload=reload_pref)
