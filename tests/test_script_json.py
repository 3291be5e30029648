"""
测试脚本风格JSON序列化器（成员注解、空值策略、动态解析）
"""
import sys
import os
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

import pytest

# 添加src到路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from wireformat import Serializer, ignore_member, rename_member
from wireformat.exceptions import MalformedInputError, NotSerializableError
from wireformat.serializers import ScriptJSONSerializer


class Status(Enum):
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class SerializableObject:
    ObjectName: Optional[str] = None
    ObjectValue: int = 0
    ObjectCreationDate: Optional[datetime] = None


@dataclass
class CamelCaseSerializableObject:
    objectName: Optional[str] = None
    objectValue: int = 0
    objectCreationDate: Optional[datetime] = None


@ignore_member("Password")
@rename_member("UserName", "login")
@dataclass
class Account:
    UserName: str = ""
    Password: Optional[str] = None
    Email: Optional[str] = None


class PremiumAccount(Account):
    """继承父类的注解"""


@dataclass
class Invoice:
    Number: int = 0
    State: Status = Status.ACTIVE
    Total: Decimal = Decimal("0")
    Accounts: List[Account] = field(default_factory=list)


class Person:
    """普通类（无类型注解）"""

    def __init__(self):
        self.Name = None
        self.Age = 0
        self._internal = "x"

    @property
    def Initial(self):
        return self.Name[:1] if self.Name else ""

    def greet(self):
        return f"Olá {self.Name}"


@pytest.fixture
def sample():
    return SerializableObject("Objeto para serialização", 1, datetime(2015, 3, 10, 14, 30))


def test_serialize_compact(sample):
    """紧凑输出，非ASCII字符原样保留"""
    json_text = Serializer.javascript_serialize(sample)

    assert json_text == (
        '{"ObjectName":"Objeto para serialização",'
        '"ObjectValue":1,'
        '"ObjectCreationDate":"2015-03-10T14:30:00"}'
    )
    print("✓ 紧凑输出测试通过")


def test_include_nulls(sample):
    """ignore_nulls=False 时写出空值"""
    sample.ObjectName = None

    json_text = Serializer.javascript_serialize(sample, ignore_nulls=False)
    assert json_text == '{"ObjectName":null,"ObjectValue":1,"ObjectCreationDate":"2015-03-10T14:30:00"}'

    json_text = Serializer.javascript_serialize(sample)
    assert json_text == '{"ObjectValue":1,"ObjectCreationDate":"2015-03-10T14:30:00"}'


def test_ignore_nulls_from_settings(settings_scope, sample):
    """默认空值策略来自配置"""
    settings_scope(ignore_nulls=False)
    sample.ObjectName = None

    assert '"ObjectName":null' in Serializer.javascript_serialize(sample)


def test_annotations_applied():
    """忽略成员不写出（即使非空），重命名成员使用传输名"""
    json_text = Serializer.javascript_serialize(Account("ana", "s3cret", "ana@example.com"))

    assert json_text == '{"login":"ana","Email":"ana@example.com"}'


def test_ignored_member_dropped_even_with_nulls():
    """ignore_nulls=False 不影响忽略成员"""
    json_text = Serializer.javascript_serialize(Account("ana"), ignore_nulls=False)

    assert json_text == '{"login":"ana","Email":null}'


def test_annotations_inherited():
    """注解沿继承链生效"""
    json_text = Serializer.javascript_serialize(PremiumAccount("bob", "pw"))

    assert json_text == '{"login":"bob"}'


def test_decode_ignores_annotations():
    """读取时按原成员名匹配，不使用传输名"""
    restored = Serializer.javascript_deserialize(
        '{"username":"ana","password":"pw","login":"other"}', Account
    )

    assert restored.UserName == "ana"
    assert restored.Password == "pw"


def test_case_insensitive_decode(sample):
    """大写开头的输出可以读入驼峰命名的类型"""
    json_text = Serializer.javascript_serialize(sample)
    restored = Serializer.javascript_deserialize(json_text, CamelCaseSerializableObject)

    assert restored.objectName == "Objeto para serialização"
    assert restored.objectValue == 1
    assert restored.objectCreationDate == datetime(2015, 3, 10, 14, 30)
    print("✓ 大小写不敏感测试通过")


def test_nested_graph():
    """嵌套对象、枚举和Decimal"""
    invoice = Invoice(
        Number=12,
        State=Status.CLOSED,
        Total=Decimal("99.5"),
        Accounts=[Account("ana", None, "a@x.com")]
    )

    json_text = Serializer.javascript_serialize(invoice)
    assert json_text == (
        '{"Number":12,"State":"closed","Total":99.5,'
        '"Accounts":[{"login":"ana","Email":"a@x.com"}]}'
    )

    restored = Serializer.javascript_deserialize(
        '{"number":12,"state":"closed","total":99.5,"accounts":[{"userName":"ana","email":"a@x.com"}]}',
        Invoice
    )
    assert restored.State is Status.CLOSED
    assert restored.Total == Decimal("99.5")
    assert restored.Accounts == [Account("ana", None, "a@x.com")]


def test_plain_class():
    """普通类：属性、实例成员；私有成员和方法不写出"""
    person = Person()
    person.Name = "Ana"
    person.Age = 30

    data = ScriptJSONSerializer().serialize_to_dict(person)
    assert data == {"Initial": "A", "Name": "Ana", "Age": 30}

    restored = Serializer.javascript_deserialize('{"name":"Bia","age":41,"initial":"Z"}', Person)
    assert isinstance(restored, Person)
    assert restored.Name == "Bia"
    assert restored.Age == 41
    assert restored.Initial == "B"


def test_cycle_detected():
    """循环引用"""
    person = Person()
    person.Age = [person]

    with pytest.raises(NotSerializableError):
        Serializer.javascript_serialize(person)


def test_dynamic_deserialize():
    """动态解析：顶层键可访问，叶子类型与JSON记号一致"""
    result = Serializer.dynamic_deserialize(
        '{"ObjectName":"nome","ObjectValue":1,"Ratio":0.5,"Active":true,'
        '"Missing":null,"Items":[1,"a"],"Child":{"Key":"v"}}'
    )

    assert result["ObjectName"] == "nome"
    assert result["ObjectValue"] == 1 and isinstance(result["ObjectValue"], int)
    assert isinstance(result["Ratio"], float)
    assert result["Active"] is True
    assert result["Missing"] is None
    assert result["Items"] == [1, "a"]
    assert result["Child"]["Key"] == "v"


def test_dynamic_deserialize_errors():
    """动态解析的空输入和语法错误"""
    assert Serializer.dynamic_deserialize(None) is None
    assert Serializer.dynamic_deserialize("  ") is None

    with pytest.raises(MalformedInputError) as exc_info:
        Serializer.dynamic_deserialize("{not json}")
    assert exc_info.value.details["format"] == "javascript"


def test_blank_input():
    """空输入返回None"""
    assert Serializer.javascript_serialize(None) is None
    assert Serializer.javascript_deserialize(None, SerializableObject) is None
    assert Serializer.javascript_deserialize("", SerializableObject) is None


class Product:
    """构造函数需要参数的普通类"""

    def __init__(self, name, price: float):
        self.Name = name
        self.Price = price
        self.Stock = 0


class PositiveAmount:
    def __init__(self, value: int):
        if value < 0:
            raise ValueError("value必须非负")
        self.Value = value


def test_constructor_with_arguments():
    """构造函数参数按名称（大小写不敏感）匹配输入键"""
    product = Product("caneta", 2.5)
    product.Stock = 7

    json_text = Serializer.javascript_serialize(product)
    assert json_text == '{"Name":"caneta","Price":2.5,"Stock":7}'

    restored = Serializer.javascript_deserialize(json_text, Product)
    assert isinstance(restored, Product)
    assert restored.Name == "caneta"
    assert restored.Price == 2.5
    assert restored.Stock == 7


def test_constructor_missing_argument_is_none():
    """缺失的构造参数传入空值"""
    restored = Serializer.javascript_deserialize('{"price":"3"}', Product)

    assert restored.Name is None
    assert restored.Price == 3.0


def test_constructor_failure():
    """构造函数拒绝输入时报错，不返回空对象"""
    with pytest.raises(MalformedInputError) as exc_info:
        Serializer.javascript_deserialize('{"value":-1}', PositiveAmount)
    assert exc_info.value.details["target_type"] == "PositiveAmount"

    assert Serializer.javascript_deserialize('{"Value":4}', PositiveAmount).Value == 4


@dataclass
class Measurement:
    Value: float = 0.0
    Exact: Optional[Decimal] = None


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_float_rejected(value):
    """NaN/Infinity不是合法JSON，拒绝写出"""
    with pytest.raises(NotSerializableError):
        Serializer.javascript_serialize(Measurement(value))


@pytest.mark.parametrize("value", [Decimal("Infinity"), Decimal("NaN")])
def test_non_finite_decimal_rejected(value):
    """非有限的Decimal"""
    with pytest.raises(NotSerializableError):
        Serializer.javascript_serialize(Measurement(1.0, value))
