"""
Constants and configuration defaults for larkcard.
"""
from pathlib import Path
from typing import Final

APP_NAME: Final[str] = "larkcard"
APP_VERSION: Final[str] = "0.3.0"
APP_DESCRIPTION: Final[str] = "Render live agent runs as a progressively updated Feishu/Lark card"

CONFIG_DIR: Final[Path] = Path.home() / ".larkcard"
CONFIG_FILE: Final[Path] = CONFIG_DIR / "config.json"

DEFAULT_MIN_UPDATE_INTERVAL_MS: Final[int] = 350
DEFAULT_PAYLOAD_SAMPLE_CHARS: Final[int] = 2000

DEFAULT_LARK_BASE_URL: Final[str] = "https://open.feishu.cn/open-apis"
DEFAULT_RECEIVE_ID_TYPE: Final[str] = "chat_id"
DEFAULT_REQUEST_TIMEOUT: Final[float] = 10.0

# Card schema
CARD_SCHEMA_VERSION: Final[str] = "2.0"
CARD_HEADER_PADDING: Final[str] = "5px 12px 5px 12px"

# User-visible strings
UNKNOWN_TOOL_NAME: Final[str] = "unknown-tool"
THINKING_PLACEHOLDER: Final[str] = "思考中..."
NO_FINAL_REPLY: Final[str] = "暂无最终回复"
NO_TIMELINE_RECORD: Final[str] = "暂无过程记录"
TIMELINE_PANEL_TITLE: Final[str] = "执行过程"
THINKING_LABEL: Final[str] = "思考"
TOOL_FAILED_TEXT: Final[str] = "工具执行失败"
TOOL_COMPLETED_TEXT: Final[str] = "工具执行完成"
EXECUTION_ERROR_TEXT: Final[str] = "执行异常"
