"""
Display labels for agent tools.

Maps normalized tool identifiers to the localized names shown on the card,
both for tool calls reported as structured messages and for tool summary
lines parsed out of plain text.
"""
import re
from typing import Dict

TOOL_NAME_LABELS: Dict[str, str] = {
    "read": "读取文件",
    "write": "写入文件",
    "edit": "编辑文件",
    "exec": "执行命令",
    "process": "进程管理",
    "web_search": "网页搜索",
    "web_fetch": "抓取网页",
    "browser": "浏览器",
    "message": "发送消息",
    "sessions_list": "列会话",
    "sessions_send": "跨会话发送",
    "sessions_spawn": "派生代理",
    "session_status": "会话状态",
    "cron": "定时任务",
    "feishu_doc_read": "飞书读文档",
    "feishu_doc_write": "飞书写文档",
    "feishu_doc_append": "飞书追加",
    "feishu_doc_list_blocks": "飞书列文档块",
    "feishu_doc_update": "飞书更新文档块",
    "feishu_doc_delete_block": "飞书删除文档块",
    "feishu_folder_list": "飞书列文件夹",
    "feishu_doc_create": "飞书创建文档",
    "memory_search": "记忆搜索",
    "memory_get": "读取记忆",
    "tts": "语音合成",
    "canvas": "画布控制",
    "nodes": "节点管理",
    "gateway": "网关管理",
    "agents_list": "列出代理",
}


def normalize_tool_name(name: str) -> str:
    """
    Normalize a tool identifier for label lookup.

    Lower-cases the name and replaces runs of hyphens and whitespace with
    a single underscore, so "Web Search" and "web-search" both become
    "web_search".
    """
    return re.sub(r'[-\s]+', '_', name.strip().lower())


def get_tool_label(name: str) -> str:
    """
    Get the display label for a tool.

    Args:
        name: Tool identifier as reported by the agent

    Returns:
        Localized label, or the name itself when it is not a known tool
    """
    return TOOL_NAME_LABELS.get(normalize_tool_name(name), name)
