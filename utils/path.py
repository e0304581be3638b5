# utils/path.py
import sys, os

def project_root() -> str:
    # 打包後（PyInstaller）以 _MEIPASS 為根
    return getattr(sys, "_MEIPASS", os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

def resource_path(rel: str) -> str:
    """
    資源檔路徑：開發時相對於專案根目錄，打包後相對於展開目錄。
    用法：resource_path("static/audio/key-press.wav")
    """
    return os.path.join(project_root(), *rel.split("/"))
