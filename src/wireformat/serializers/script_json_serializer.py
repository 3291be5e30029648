"""
脚本风格JSON序列化器
写出时应用成员注解（忽略/重命名）并可选择是否写出空值；
读取时成员名大小写不敏感，便于与外部驼峰命名的数据交换
"""
import logging
from typing import Any, List, Optional, Type

from ..config.settings import get_settings
from ..core.inspector import MemberDescriptor
from .base import JSONSerializerBase, JsonValue, is_blank

logger = logging.getLogger(__name__)


class ScriptJSONSerializer(JSONSerializerBase):
    """脚本风格JSON序列化器"""

    format_name = "javascript"
    case_sensitive = False

    def __init__(self, ignore_nulls: Optional[bool] = None):
        """
        初始化脚本风格JSON序列化器

        Args:
            ignore_nulls: 是否省略空值成员，默认使用配置中的 ignore_nulls
        """
        super().__init__()
        self.ignore_nulls = get_settings().ignore_nulls if ignore_nulls is None else ignore_nulls

    def member_items(self, descriptors: List[MemberDescriptor]) -> List[tuple]:
        """跳过忽略成员，使用传输名，按需省略空值"""
        items = []
        for descriptor in descriptors:
            if descriptor.ignored:
                continue
            if descriptor.value is None and self.ignore_nulls:
                continue
            items.append((descriptor.wire_name, descriptor.value))
        return items

    def serialize(self, obj: Any) -> Optional[str]:
        """序列化为紧凑JSON字符串"""
        if obj is None:
            return None

        text = self.dumps(self.serialize_to_dict(obj))
        logger.debug(f"脚本风格JSON序列化完成: {type(obj).__name__}, ignore_nulls={self.ignore_nulls}")
        return text

    def deserialize(self, data: Optional[str], return_type: Optional[Type] = None) -> Any:
        """
        从JSON字符串反序列化（成员名大小写不敏感，不读取注解）

        Args:
            data: JSON字符串
            return_type: 目标类型，None时返回动态结构

        Returns:
            目标类型实例，输入为空时返回None
        """
        if is_blank(data):
            return None

        return self.bind(self.loads(data), return_type)

    def deserialize_dynamic(self, data: Optional[str]) -> JsonValue:
        """
        解析为动态结构（嵌套的dict/list），叶子值类型与JSON记号一致

        Raises:
            MalformedInputError: 不是合法的JSON
        """
        if is_blank(data):
            return None

        return self.loads(data)
