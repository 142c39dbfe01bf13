#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
aitrans 的HTML处理模块

这个模块负责保留结构的HTML翻译:
1. 按文档顺序找到需要翻译的文本节点
2. 把全部文本一次性交给翻译服务批量翻译
3. 将译文写回原来的位置并清洗输出
4. 纯文本输入则整体翻译后按Markdown渲染
"""

import copy
import os
import time
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from bs4 import NavigableString, Tag

from aitrans.config import HTML_FILE_EXTENSIONS, HTML_TAGS_NO_TRANSLATE, NO_TRANSLATE_CLASS
from aitrans.errors import MismatchedResponseError
from aitrans.fragment import is_text_leaf, parse_fragment, serialize_fragment
from aitrans.markdown_renderer import render_markdown
from aitrans.sanitizer import DEFAULT_POLICY, SanitizationPolicy, sanitize
from aitrans.translation_services import TranslationService

# 被跳过的文本节点没有翻译序号
SKIPPED_INDEX = -1


@dataclass(frozen=True)
class TextUnit:
    """一个按抽取顺序编号的文本节点

    Attributes:
        index: 在翻译请求中的位置，跳过的节点为 SKIPPED_INDEX
        value: 文本内容（保留前后空白）
        skip: 是否位于不翻译的区域内
    """
    index: int
    value: str
    skip: bool = False


def is_excluded(element: Tag) -> bool:
    """判断元素内部的文本是否应原样保留"""
    if element.name in HTML_TAGS_NO_TRANSLATE:
        return True
    translate = element.get("translate")
    if isinstance(translate, str) and translate.strip().lower() == "no":
        return True
    classes = element.get("class") or []
    return NO_TRANSLATE_CLASS in classes


def _walk_leaves(element, skip=False):
    """深度优先、先序遍历，产生 (文本节点, 是否跳过)

    用显式栈代替递归，嵌套再深也不会触发 RecursionError。
    """
    stack = [(node, skip) for node in reversed(element.contents)]
    while stack:
        node, inherited = stack.pop()
        if isinstance(node, Tag):
            excluded = inherited or is_excluded(node)
            stack.extend((child, excluded) for child in reversed(node.contents))
        elif is_text_leaf(node) and node.strip():
            yield node, inherited


def _translatable_leaves(fragment) -> List[NavigableString]:
    return [node for node, skip in _walk_leaves(fragment) if not skip]


def iter_text_units(fragment) -> Iterator[TextUnit]:
    """按文档顺序产生所有非空白文本节点，包括被跳过的节点

    Args:
        fragment: 解析后的HTML片段

    Yields:
        TextUnit: 可翻译的节点按0开始连续编号，跳过的节点 skip=True
    """
    index = 0
    for node, skip in _walk_leaves(fragment):
        if skip:
            yield TextUnit(SKIPPED_INDEX, str(node), True)
        else:
            yield TextUnit(index, str(node), False)
            index += 1


def extract(fragment) -> List[TextUnit]:
    """抽取需要翻译的文本单元

    空白节点以及 code/pre/script/style 等区域内的文本不会出现在结果中。
    """
    return [unit for unit in iter_text_units(fragment) if not unit.skip]


def _keep_outer_whitespace(original: str, translated: str) -> str:
    """译文丢失了原文前后的空白时补回，避免行内元素之间的空格消失"""
    if translated[:1].isspace() or translated.strip() == "":
        leading = ""
    else:
        leading = original[:len(original) - len(original.lstrip())]
    if translated[-1:].isspace():
        trailing = ""
    else:
        trailing = original[len(original.rstrip()):]
    return leading + translated + trailing


def reassemble(fragment,
               units: Sequence[TextUnit],
               translated: Sequence[str],
               policy: SanitizationPolicy = DEFAULT_POLICY) -> str:
    """把译文按序号写回文档片段，序列化并清洗

    传入的片段不会被修改，写回发生在它的深度复制上。

    Args:
        fragment: extract() 使用的同一个HTML片段
        units: extract() 的结果
        translated: 与 units 等长、同序的译文
        policy: 清洗策略

    Returns:
        str: 清洗后的HTML

    Raises:
        MismatchedResponseError: 译文数量与文本单元数量不一致
        ValueError: 文档片段与文本单元不对应
    """
    if len(translated) != len(units):
        raise MismatchedResponseError(len(units), len(translated))

    clone = copy.deepcopy(fragment)
    leaves = _translatable_leaves(clone)
    if len(leaves) != len(units):
        raise ValueError(f"文本单元与文档片段不对应: 片段中有 {len(leaves)} 个文本节点，单元有 {len(units)} 个")

    for position, (leaf, unit) in enumerate(zip(leaves, units)):
        if unit.index != position or str(leaf) != unit.value:
            raise ValueError(f"第 {position} 个文本节点与文本单元不一致")
        leaf.replace_with(NavigableString(_keep_outer_whitespace(unit.value, translated[position])))

    return sanitize(serialize_fragment(clone), policy)


def looks_like_html(content: str) -> bool:
    """判断内容中是否包含HTML标签"""
    return parse_fragment(content).find(True) is not None


def detect_input_format(input_file: str, content: str) -> str:
    """根据扩展名和内容判断输入格式

    Returns:
        str: 'html' 或 'text'
    """
    if input_file.lower().endswith(HTML_FILE_EXTENSIONS):
        return "html"
    return "html" if looks_like_html(content) else "text"


class HTMLProcessor:
    """HTML处理器，负责保留结构的翻译流程

    这个类负责:
    1. 解析HTML片段并抽取文本单元
    2. 调用翻译服务批量翻译
    3. 将译文写回并清洗
    4. 纯文本输入走Markdown渲染
    """

    def __init__(self, translation_service: TranslationService,
                 policy: SanitizationPolicy = DEFAULT_POLICY, debug=True):
        """初始化HTML处理器

        Args:
            translation_service: 翻译服务实例
            policy: 输出清洗策略
            debug: 是否显示调试信息
        """
        self.translation_service = translation_service
        self.policy = policy
        self.debug = debug
        self.units_count = 0

    def debug_print(self, message):
        """输出调试信息

        Args:
            message: 要输出的信息
        """
        if self.debug:
            print(message, flush=True)

    async def translate_html_content(self, html_content: str) -> str:
        """翻译HTML片段，只替换文本节点

        Args:
            html_content: HTML片段字符串

        Returns:
            清洗后的译文HTML
        """
        self.debug_print(f"[HTML处理] 正在解析HTML...")
        fragment = parse_fragment(html_content)

        if not any(True for _ in iter_text_units(fragment)):
            self.debug_print(f"[HTML处理] 片段中没有可见文本，跳过翻译")
            self.units_count = 0
            return sanitize(html_content, self.policy)

        units = extract(fragment)
        self.units_count = len(units)

        if not units:
            # 所有文本都在不翻译区域内，整体交给模型按HTML翻译
            self.debug_print(f"[HTML处理] 没有可单独翻译的文本节点，改为整体翻译HTML")
            translated_html = await self.translation_service.translate_html(html_content)
            return sanitize(translated_html, self.policy)

        self.debug_print(f"[HTML处理] 找到 {len(units)} 个需要翻译的文本节点")
        start_time = time.time()
        translated = await self.translation_service.translate_batch([unit.value for unit in units])
        self.debug_print(f"[HTML处理] 批量翻译完成，耗时: {time.time() - start_time:.2f}秒")

        return reassemble(fragment, units, translated, self.policy)

    async def translate_text_content(self, text: str) -> str:
        """整体翻译纯文本，再把模型输出按Markdown渲染为HTML

        Args:
            text: 纯文本或Markdown

        Returns:
            清洗后的HTML
        """
        if not text.strip():
            return ""
        self.debug_print(f"[HTML处理] 纯文本输入，共 {len(text)} 个字符")
        translated = await self.translation_service.translate_text(text)
        self.units_count = 1
        return render_markdown(translated)

    async def translate_content(self, content: str, input_format: str = "html") -> str:
        """按输入格式选择翻译路径

        Args:
            content: 输入内容
            input_format: 'html' 或 'text'
        """
        if input_format == "text":
            return await self.translate_text_content(content)
        return await self.translate_html_content(content)

    async def translate_file(self, input_file: str, output_file: Optional[str] = None,
                             input_format: str = "auto") -> str:
        """翻译文件并保存结果

        Args:
            input_file: 输入文件路径
            output_file: 输出HTML文件路径，如果不指定则自动生成
            input_format: 'auto'、'html' 或 'text'

        Returns:
            输出文件的路径

        Raises:
            FileNotFoundError: 如果输入文件不存在
        """
        if not os.path.exists(input_file):
            raise FileNotFoundError(f"无法找到输入文件：{input_file}")

        with open(input_file, 'r', encoding='utf-8') as f:
            content = f.read()

        if input_format == "auto":
            input_format = detect_input_format(input_file, content)
        self.debug_print(f"[HTML处理] 输入格式: {input_format}")

        # 如果未指定输出文件，创建默认名称
        if not output_file:
            basename = os.path.basename(input_file)
            dirname = os.path.dirname(input_file)
            name, ext = os.path.splitext(basename)
            if input_format == "text":
                ext = ".html"
            output_file = os.path.join(dirname, f"{name}_translated{ext}")

        self.debug_print(f"[HTML处理] 开始处理文件: {input_file}")
        self.debug_print(f"[HTML处理] 输出文件: {output_file}")

        translated_html = await self.translate_content(content, input_format)

        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(translated_html)

        self.debug_print(f"[HTML处理] 处理完成，共 {self.units_count} 个文本单元")
        return output_file
