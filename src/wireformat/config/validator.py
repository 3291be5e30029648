"""
配置验证器
"""
import codecs
import logging
from typing import Dict, Any, Optional

from ..exceptions import ConfigError, InvalidArgumentError

logger = logging.getLogger(__name__)

# 带字节序标记（BOM）的编码
_PREAMBLE_ENCODINGS = {"utf-8-sig", "utf-16", "utf-32"}


class ConfigValidator:
    """配置验证器"""

    VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    def resolve_encoding(self, encoding: Optional[str], default: str = "utf-8") -> str:
        """
        解析编码名称

        Args:
            encoding: 编码名称，None时使用默认值
            default: 默认编码

        Returns:
            Python规范化后的编码名称

        Raises:
            InvalidArgumentError: 编码不存在
        """
        name = encoding or default
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError("编码名称不能为空", argument="encoding", value=name)

        try:
            return codecs.lookup(name).name
        except LookupError as e:
            logger.warning(f"未知的编码: {name}")
            raise InvalidArgumentError(
                f"未知的编码: {name}", argument="encoding", value=name
            ) from e

    def encoding_label(self, encoding: str) -> str:
        """返回写入XML声明中的编码名称（IANA风格）"""
        name = self.resolve_encoding(encoding)
        if name == "utf-8-sig":
            return "utf-8"
        if name == "ascii":
            return "us-ascii"
        if name.startswith("iso8859-"):
            return "iso-8859-" + name[len("iso8859-"):]
        if name.startswith("cp125"):
            return "windows-" + name[2:]
        return name

    def preamble(self, encoding: str) -> str:
        """编码对应的字节序标记字符，没有则返回空串"""
        if self.resolve_encoding(encoding) in _PREAMBLE_ENCODINGS:
            return "\ufeff"
        return ""

    def validate_wire_name(self, name: Any, argument: str = "name") -> str:
        """验证成员名/传输名（非空字符串）"""
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError(
                "成员名称必须是非空字符串", argument=argument, value=name
            )
        return name

    def validate_settings(self, config: Dict[str, Any]) -> bool:
        """验证配置字典"""
        try:
            level = str(config.get("log_level", "WARNING")).upper()
            if level not in self.VALID_LOG_LEVELS:
                raise ConfigError(
                    message=f"无效的日志级别: {config.get('log_level')}",
                    config_key="log_level",
                    details={"valid_values": self.VALID_LOG_LEVELS}
                )

            if "default_encoding" in config:
                self.resolve_encoding(config["default_encoding"])

            indent_char = config.get("xml_indent_char", "\t")
            if indent_char not in (" ", "\t"):
                raise ConfigError(
                    message=f"XML缩进字符只能是空格或制表符: {indent_char!r}",
                    config_key="xml_indent_char"
                )

            indent_size = config.get("xml_indent_size", 1)
            if not isinstance(indent_size, int) or indent_size < 0 or indent_size > 8:
                raise ConfigError(
                    message=f"XML缩进宽度必须在0-8之间: {indent_size}",
                    config_key="xml_indent_size",
                    details={"valid_range": "0-8"}
                )

            newline = config.get("xml_newline", "\r\n")
            if newline not in ("\n", "\r\n"):
                raise ConfigError(
                    message=f"无效的XML换行符: {newline!r}",
                    config_key="xml_newline"
                )

            return True

        except ConfigError:
            raise
        except InvalidArgumentError as e:
            raise ConfigError(f"配置验证失败: {e.message}", config_key="default_encoding") from e
