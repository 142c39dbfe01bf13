#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
HTML片段的解析与序列化

所有模块都通过这里解析和输出HTML，保证抽取、回填与清洗看到的是同一棵树、同一种输出格式。
"""

from bs4 import BeautifulSoup, NavigableString
from bs4.dammit import EntitySubstitution
from bs4.element import PreformattedString
from bs4.formatter import HTMLFormatter


class _SourceOrderFormatter(HTMLFormatter):
    """按原始顺序输出属性，bs4 默认会按字母排序"""

    def attributes(self, tag):
        if tag.attrs is None:
            return []
        return [
            (key, None if self.empty_attributes_are_booleans and value == "" else value)
            for key, value in tag.attrs.items()
        ]


# 只转义 & < >，非ASCII字符原样输出；空元素输出为 <br> 而不是 <br/>
FRAGMENT_FORMATTER = _SourceOrderFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
    empty_attributes_are_booleans=True,
)


def parse_fragment(html_content: str) -> BeautifulSoup:
    """把HTML片段解析为独立的文档树

    Args:
        html_content: HTML片段字符串

    Returns:
        BeautifulSoup对象
    """
    return BeautifulSoup(html_content or "", "html.parser")


def serialize_fragment(fragment) -> str:
    """把文档树（或其中的元素）序列化为HTML字符串"""
    return fragment.decode(formatter=FRAGMENT_FORMATTER)


def is_text_leaf(node) -> bool:
    """判断节点是否为承载文本的叶子（排除注释、DOCTYPE、CDATA等）"""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)
