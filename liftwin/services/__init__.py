from liftwin.services.formula_service import (
    dots, run_index, athlete_total, strength_score, run_score,
)
from liftwin.services.ranking_service import (
    DisciplineResult, LeaderboardRow, EventResults,
    allocate_points, rank_discipline, build_leaderboard, score_event,
    points_table_for, active_points_table, format_leaderboard,
)
from liftwin.services.storage_service import (
    KeyValueStore, SqlKeyValueStore,
    load_index, save_index, load_event, save_event,
    get_last_open, set_last_open, get_theme, set_theme,
)
from liftwin.services.share_service import (
    encode_share_key, decode_share_key, build_share_link,
    extract_key_from_url, extract_event_id_from_url, share_qr_png,
)
from liftwin.services.event_service import (
    ImportOutcome, BootResult,
    create_event, open_event, delete_event, list_events, touch_index,
    resolve_incoming, import_from_url, import_from_json, boot, share_link_for,
)
from liftwin.services.roster_service import (
    add_athlete, update_athlete, apply_entry, remove_athlete, clear_results,
    set_points, rename_event,
)
from liftwin.services.autosave_service import AutoSaver, Debouncer
from liftwin.services.export_service import event_json, read_event_json, leaderboard_csv

__all__ = [
    # formulas
    "dots", "run_index", "athlete_total", "strength_score", "run_score",
    # ranking
    "DisciplineResult", "LeaderboardRow", "EventResults",
    "allocate_points", "rank_discipline", "build_leaderboard", "score_event",
    "points_table_for", "active_points_table", "format_leaderboard",
    # event store
    "KeyValueStore", "SqlKeyValueStore",
    "load_index", "save_index", "load_event", "save_event",
    "get_last_open", "set_last_open", "get_theme", "set_theme",
    # sharing
    "encode_share_key", "decode_share_key", "build_share_link",
    "extract_key_from_url", "extract_event_id_from_url", "share_qr_png",
    # event lifecycle / reconciliation
    "ImportOutcome", "BootResult",
    "create_event", "open_event", "delete_event", "list_events", "touch_index",
    "resolve_incoming", "import_from_url", "import_from_json", "boot", "share_link_for",
    # roster
    "add_athlete", "update_athlete", "apply_entry", "remove_athlete", "clear_results",
    "set_points", "rename_event",
    # autosave
    "AutoSaver", "Debouncer",
    # export
    "event_json", "read_event_json", "leaderboard_csv",
]
