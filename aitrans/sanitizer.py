#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
aitrans 的HTML清洗模块

所有译文在输出之前都必须经过这里:
1. 不在白名单中的标签被拆除，但其中的文本保留
2. 删除事件处理属性以及白名单之外的属性
3. 删除可执行脚本的链接，并给链接强制加上 target/rel
4. 删除注释、DOCTYPE 等非文本内容

清洗永远不会抛出异常，异常输入会退化为尽力而为的输出。
"""

import html
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping

from bs4 import Tag
from bs4.builder import ParserRejectedMarkup
from bs4.element import PreformattedString

from aitrans.fragment import parse_fragment, serialize_fragment

# 浏览器解析URL协议前会忽略空白和控制字符
_URL_IGNORED_CHARS = re.compile(r"[\x00-\x20\x7f]+")


@dataclass(frozen=True)
class SanitizationPolicy:
    """HTML清洗策略

    Attributes:
        allowed_tags: 允许保留的标签
        allowed_attrs_by_tag: 按标签指定的属性白名单
        default_allowed_attrs: 其他标签允许保留的属性
        event_handler_prefix: 事件处理属性的前缀
        unsafe_url_schemes: 会执行脚本的链接协议
        forced_anchor_attrs: 强制设置在链接上的属性
    """
    allowed_tags: FrozenSet[str]
    allowed_attrs_by_tag: Mapping[str, FrozenSet[str]] = field(default_factory=lambda: MappingProxyType({}))
    default_allowed_attrs: FrozenSet[str] = frozenset()
    event_handler_prefix: str = "on"
    unsafe_url_schemes: FrozenSet[str] = frozenset()
    forced_anchor_attrs: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def allowed_attrs(self, tag_name: str) -> FrozenSet[str]:
        return self.allowed_attrs_by_tag.get(tag_name, self.default_allowed_attrs)


DEFAULT_POLICY = SanitizationPolicy(
    allowed_tags=frozenset([
        "div", "p", "span", "br", "strong", "b", "em", "i", "u", "code", "pre",
        "ul", "ol", "li", "h1", "h2", "h3", "h4", "h5", "h6", "a", "blockquote",
    ]),
    allowed_attrs_by_tag=MappingProxyType({
        "a": frozenset(["href", "title", "rel", "target"]),
    }),
    default_allowed_attrs=frozenset(["dir", "lang"]),
    event_handler_prefix="on",
    unsafe_url_schemes=frozenset(["javascript:", "vbscript:", "data:"]),
    forced_anchor_attrs=MappingProxyType({
        "target": "_blank",
        "rel": "noreferrer noopener",
    }),
)


def is_unsafe_url(url, policy: SanitizationPolicy = DEFAULT_POLICY) -> bool:
    """判断链接是否使用了会执行脚本的协议

    Args:
        url: 链接地址
        policy: 清洗策略

    Returns:
        bool: 是否不安全
    """
    if isinstance(url, list):
        url = " ".join(url)
    normalized = _URL_IGNORED_CHARS.sub("", url or "").lower()
    return any(normalized.startswith(scheme) for scheme in policy.unsafe_url_schemes)


def _clean_attributes(element: Tag, policy: SanitizationPolicy):
    allowed = policy.allowed_attrs(element.name)
    for name in list(element.attrs):
        lowered = name.lower()
        if lowered.startswith(policy.event_handler_prefix) or lowered not in allowed:
            del element[name]


def _clean_anchor(element: Tag, policy: SanitizationPolicy):
    if element.has_attr("href") and is_unsafe_url(element["href"], policy):
        del element["href"]
    for name, value in policy.forced_anchor_attrs.items():
        element[name] = value


def sanitize(html_content, policy: SanitizationPolicy = DEFAULT_POLICY) -> str:
    """按白名单清洗HTML

    Args:
        html_content: 待清洗的HTML字符串
        policy: 清洗策略，默认使用 DEFAULT_POLICY

    Returns:
        str: 清洗后的HTML
    """
    if not html_content:
        return ""

    try:
        fragment = parse_fragment(html_content)
    except ParserRejectedMarkup:
        # 解析器拒绝的内容整体当作文本输出
        return html.escape(html_content, quote=False)

    # 注释、DOCTYPE、CDATA、处理指令都不是可见文本
    for node in list(fragment.descendants):
        if isinstance(node, PreformattedString):
            node.extract()

    # find_all 返回的是快照，拆除父元素不会影响子元素的遍历
    for element in fragment.find_all(True):
        if element.name not in policy.allowed_tags:
            element.unwrap()
            continue
        _clean_attributes(element, policy)
        if element.name == "a":
            _clean_anchor(element, policy)

    return serialize_fragment(fragment)
