"""
解码后的调用数据

交易服务会把 calldata 的 4 字节选择器解析为方法名，并给出命名参数列表。
这里按方法名判断调用属于哪一类（设置变更 / ERC20 转账 / ERC721 转账）。
"""
from __future__ import annotations

from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Safe 自身的设置变更方法
SETTINGS_CHANGE_METHODS: frozenset[str] = frozenset({
    "setFallbackHandler",
    "addOwnerWithThreshold",
    "removeOwner",
    "swapOwner",
    "changeThreshold",
    "changeMasterCopy",
    "enableModule",
    "disableModule",
    "setGuard",
})

ERC20_TRANSFER_METHODS: frozenset[str] = frozenset({"transfer", "transferFrom"})

ERC721_TRANSFER_METHODS: frozenset[str] = frozenset({"transfer", "transferFrom", "safeTransferFrom"})


class DecodedCall(Protocol):
    """分类器依赖的解码调用能力"""

    def is_settings_change(self) -> bool: ...

    def is_erc20_transfer_method(self) -> bool: ...

    def is_erc721_transfer_method(self) -> bool: ...

    def get_parameter_value(self, name: str) -> str | None: ...


class Parameter(BaseModel):
    """方法参数"""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str
    type: str = ""
    # 数组/元组参数为嵌套结构
    value: Any = None
    value_decoded: Any = None


class DataDecoded(BaseModel):
    """解码后的方法调用"""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    method: str
    parameters: list[Parameter] = Field(default_factory=list)

    def is_settings_change(self) -> bool:
        return self.method in SETTINGS_CHANGE_METHODS

    def is_erc20_transfer_method(self) -> bool:
        return self.method in ERC20_TRANSFER_METHODS

    def is_erc721_transfer_method(self) -> bool:
        return self.method in ERC721_TRANSFER_METHODS

    def get_parameter_value(self, name: str) -> str | None:
        """获取单值参数；参数不存在或为数组时返回 None"""
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter.value if isinstance(parameter.value, str) else None
        return None
