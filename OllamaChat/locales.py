"""
Localized user-facing strings.

Keys are looked up per locale with a fallback to the default locale, and
formatted with str.format() arguments.
"""

import logging
from typing import Dict

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "zh-CN"

MESSAGES: Dict[str, Dict[str, str]] = {
    "zh-CN": {
        "contentTooLong": "消息内容太长了，请缩短后再试。",
        "connTimeout": "连接 Ollama 服务超时。",
        "connRefused": "Ollama 服务拒绝连接，请检查服务是否已启动。",
        "responseTimeout": "Ollama 服务响应超时。",
        "unknownError": "发生未知错误，请稍后再试。",
        "success": "已重置当前会话 {0} 的上下文。",
        "successWithTarget": "已重置用户 {0} 的上下文。",
        "insufficientAuthority": "权限不足。",
        "status": "会话数: {0}\n模型调用: {1} / 成功: {2} / 失败: {3}\n平均延迟: {4} ms",
    },
    "en-US": {
        "contentTooLong": "Your message is too long. Please shorten it and try again.",
        "connTimeout": "Timed out connecting to the Ollama server.",
        "connRefused": "The Ollama server refused the connection. Is it running?",
        "responseTimeout": "The Ollama server took too long to respond.",
        "unknownError": "An unknown error occurred. Please try again later.",
        "success": "Chat context for {0} has been reset.",
        "successWithTarget": "Chat context for user {0} has been reset.",
        "insufficientAuthority": "You do not have permission to do that.",
        "status": "Conversations: {0}\nBackend calls: {1} / OK: {2} / Failed: {3}\nAvg latency: {4} ms",
    },
}


class Translator:
    """Resolves message keys for one locale."""

    def __init__(self, locale: str = DEFAULT_LOCALE):
        if locale not in MESSAGES:
            logger.warning(f"Unknown locale '{locale}', falling back to {DEFAULT_LOCALE}")
            locale = DEFAULT_LOCALE
        self.locale = locale

    def __call__(self, key: str, *args) -> str:
        template = MESSAGES[self.locale].get(key)
        if template is None:
            template = MESSAGES[DEFAULT_LOCALE][key]
        return template.format(*args)
