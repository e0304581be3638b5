# main.py
import sys, os
sys.path.append(os.path.dirname(__file__))  # 確保能找到 config.py

from utils.crashlog import setup_crashlog, log_exception, log_dir
setup_crashlog()

import argparse, logging, traceback
from logging.handlers import RotatingFileHandler
from config import AppConfig, AudioConfig, NetConfig, SecretConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

def _init_logging(verbose: bool = False):
    if logging.getLogger().handlers:
        return
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT, encoding="utf-8")
    try:
        fh = RotatingFileHandler(os.path.join(log_dir(), "app.log"), maxBytes=2*1024*1024, backupCount=3, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(fh)
    except OSError:
        logging.warning("File logging disabled", exc_info=True)

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Shared piano: play, listen to others, play tunes from comments.")
    ap.add_argument('--room-url', default=None, help="websocket relay, e.g. ws://localhost:8765")
    ap.add_argument('--room', default='lobby')
    ap.add_argument('--name', default='anonymous', help="author name for posted comments")
    ap.add_argument('--audio', default='sample', choices=['sample', 'midi', 'none'])
    ap.add_argument('--sample', default=None, help="one-shot sample pitched from C4")
    ap.add_argument('--comments', default=None, help="text file, comments separated by blank lines")
    ap.add_argument('--keymap', default=None, help="keymap JSON (char -> key name)")
    ap.add_argument('--midi', default=None, help="MIDI file to play on start")
    ap.add_argument('--play', default=None, help='notes to play on start, e.g. "C4 E4 G4"')
    ap.add_argument('--secret', default=None, help="override the secret sequence (comma separated)")
    ap.add_argument('-v', '--verbose', action='store_true')
    return ap

def build_config(args) -> AppConfig:
    cfg = AppConfig(
        audio=AudioConfig(backend=args.audio, sample_path=args.sample),
        net=NetConfig(url=args.room_url, room=args.room, username=args.name.strip() or "anonymous"),
    )
    if args.secret:
        cfg.secret = SecretConfig(sequence=tuple(s.strip().upper() for s in args.secret.split(",") if s.strip()))
    return cfg

def main(argv=None):
    args = build_parser().parse_args(argv)
    _init_logging(args.verbose)
    logging.info("應用程式啟動")

    cfg = build_config(args)
    room = None
    if cfg.net.url:
        from net.ws_room import WebSocketRoom
        room = WebSocketRoom(cfg.net.url, cfg.net.room).connect()

    from app import App
    app = App(cfg, room=room)
    if args.keymap:
        app.load_keymap_file(args.keymap)
    if args.comments:
        app.load_comments(args.comments)
    app.run(initial_text=args.play, initial_midi=args.midi)

if __name__ == '__main__':
    try:
        main()
    except Exception as e:
        try:
            log_exception("Top-level exception", e)
        except OSError:
            pass
        logging.error("未捕捉的例外：%s", e, exc_info=True)
        print("程式發生錯誤，請到 logs/ 資料夾看 app.log 與 error-*.txt")
        traceback.print_exc()
