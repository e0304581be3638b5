# utils/crashlog.py
import os, sys, faulthandler, datetime, traceback, threading

_fault_file = None
LOG_DIR_NAME = "logs"

def log_dir() -> str:
    # 打包後放在執行檔旁邊，開發時放在目前目錄
    root = os.path.dirname(sys.executable) if hasattr(sys, "_MEIPASS") else os.getcwd()
    base = os.environ.get("PIANO_ROOM_LOG_DIR") or os.path.join(root, LOG_DIR_NAME)
    os.makedirs(base, exist_ok=True)
    return base

def _new_log_path(prefix: str = "crash") -> str:
    stamp = datetime.datetime.now().strftime("%Y%m%d-%H%M%S-%f")
    return os.path.join(log_dir(), f"{prefix}-{stamp}.txt")

def _write_report(prefix: str, header: str, exc_type, exc, tb) -> str:
    path = _new_log_path(prefix)
    with open(path, "w", encoding="utf-8") as out:
        out.write(header + "\n")
        out.write("=" * 60 + "\n")
        traceback.print_exception(exc_type, exc, tb, file=out)
    return path

def setup_crashlog():
    """原生崩潰（faulthandler）、未捕捉例外與執行緒例外都寫到 logs/。"""
    global _fault_file
    try:
        if _fault_file is None:
            _fault_file = open(_new_log_path("native"), "w", encoding="utf-8")
        faulthandler.enable(_fault_file, all_threads=True)
    except OSError:
        _fault_file = None

    def _hook(exc_type, exc, tb):
        try:
            _write_report("crash", "UNCAUGHT EXCEPTION", exc_type, exc, tb)
        finally:
            sys.__excepthook__(exc_type, exc, tb)
    sys.excepthook = _hook

    # websocket 收訊執行緒的例外也要留下紀錄
    def _thread_hook(args):
        name = getattr(args.thread, "name", "?")
        _write_report("thread", f"THREAD EXCEPTION ({name})", args.exc_type, args.exc_value, args.exc_traceback)
    threading.excepthook = _thread_hook

def log_exception(title: str, exc: BaseException) -> str:
    return _write_report("error", f"[{title}] {type(exc).__name__}: {exc}", type(exc), exc, exc.__traceback__)
