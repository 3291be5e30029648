"""
日期时间辅助函数
时区转换、ISO8601/Unix时间格式化以及可用时区列表
"""
import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Dict, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

from ..exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

UNIX_EPOCH = datetime(1970, 1, 1)

TimeZoneLike = Union[str, tzinfo]


def _zone(value: TimeZoneLike, argument: str) -> tzinfo:
    if isinstance(value, tzinfo):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError("时区标识不能为空", argument=argument, value=value)
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.warning(f"未知的时区: {value}")
        raise InvalidArgumentError(f"未知的时区: {value}", argument=argument, value=value) from e


def change_time_zone(dt: datetime, source_tz: TimeZoneLike, target_tz: TimeZoneLike) -> datetime:
    """
    把时间从源时区转换到目标时区

    不带时区的时间按源时区的本地时间解释；带时区的时间先换算到源时区。

    Args:
        dt: 待转换的时间
        source_tz: 源时区（IANA标识如 "Asia/Shanghai"，或tzinfo对象）
        target_tz: 目标时区

    Returns:
        目标时区的时间（带时区信息）

    Raises:
        InvalidArgumentError: 时区不存在
    """
    source = _zone(source_tz, "source_tz")
    target = _zone(target_tz, "target_tz")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=source)
    else:
        dt = dt.astimezone(source)

    return dt.astimezone(target)


def to_iso8601_string(dt: datetime) -> str:
    """按 YYYY-MM-DDTHH:MM:SS 格式输出（不含毫秒和时区）"""
    return dt.strftime("%Y-%m-%dT%H:%M:%S")


def to_unix_time(dt: datetime) -> int:
    """
    距 1970-01-01T00:00:00 的秒数（四舍五入到整秒）

    不带时区的时间直接按字面值计算，带时区的时间先换算为UTC
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return round((dt - UNIX_EPOCH) / timedelta(seconds=1))


def _format_offset(offset: timedelta) -> str:
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"UTC{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def system_time_zones() -> Dict[str, str]:
    """
    列出系统可用的时区

    Returns:
        时区标识 -> 显示名称，如 {"Asia/Shanghai": "(UTC+08:00) Asia/Shanghai"}，按标识排序
    """
    now = datetime.now(timezone.utc)
    zones = {}
    for key in sorted(available_timezones()):
        try:
            offset = now.astimezone(ZoneInfo(key)).utcoffset()
        except (ZoneInfoNotFoundError, ValueError):
            logger.debug(f"跳过无法加载的时区: {key}")
            continue
        zones[key] = f"({_format_offset(offset)}) {key}"

    logger.debug(f"可用时区: {len(zones)}个")
    return zones
