#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
模型输出的Markdown渲染

只支持翻译结果中常见的语法: 标题、粗体/斜体、列表、引用、代码与链接。
代码先被替换为占位符，最后才还原，所以其中的内容不会被其他规则改写。
渲染结果最终经过 sanitize 清洗。
"""

import html
import re

from aitrans.sanitizer import sanitize

_FENCED_CODE = re.compile(r"```(?:[\w+#.-]*[ \t]*\n)?([\s\S]*?)```")
_INLINE_CODE = re.compile(r"`([^`\n]+)`")
_HEADING = re.compile(r"^(#{1,6})[ \t]+(.*)$", re.MULTILINE)
_BLOCKQUOTE = re.compile(r"^&gt;[ \t]?(.*)$", re.MULTILINE)
_BULLET_ITEM = re.compile(r"^\s*[-*+]\s+(.*)$")
_NUMBERED_ITEM = re.compile(r"^\s*\d+\.\s+(.*)$")
_LINK = re.compile(r"\[([^\]\n]+)\]\((https?://[^)\s]+)\)")
_BOLD = re.compile(r"\*\*(?=\S)(.+?)(?<=\S)\*\*")
_ITALIC_STAR = re.compile(r"(^|[^\w*])\*(?=[^\s*])(.+?)(?<=[^\s*])\*(?![\w*])")
_ITALIC_UNDERSCORE = re.compile(r"(^|\W)_(?=[^\s_])(.+?)(?<=[^\s_])_(?!\w)")
_BLANK_LINES = re.compile(r"\n[ \t]*\n\s*")
_BLOCK_LINE = re.compile(r"^\s*(?:<(?:h[1-6]|ul|ol|li|pre|blockquote)\b|</(?:ul|ol)>|\x00CODEBLOCK\d+\x00\s*$)")

# 占位符的定界符，输入中的 NUL 会先被删除
_MARK = "\x00"


class _Placeholders:
    """把片段替换为 \\x00NAME0\\x00 形式的占位符，稍后按类别还原"""

    def __init__(self, name):
        self.name = name
        self.items = []
        self.pattern = re.compile(rf"{_MARK}{name}(\d+){_MARK}")

    def stash(self, content):
        self.items.append(content)
        return f"{_MARK}{self.name}{len(self.items) - 1}{_MARK}"

    def _lookup(self, match):
        index = int(match.group(1))
        if index < len(self.items):
            return self.items[index]
        return match.group(0)

    def restore(self, text):
        return self.pattern.sub(self._lookup, text)


def _escape(text, quote=True):
    return html.escape(text, quote=quote)


def _apply_emphasis(text):
    text = _BOLD.sub(r"<strong>\1</strong>", text)
    text = _ITALIC_STAR.sub(r"\1<em>\2</em>", text)
    text = _ITALIC_UNDERSCORE.sub(r"\1<em>\2</em>", text)
    return text


def _convert_lists(text):
    """逐行识别列表；非列表行或另一种列表会关闭当前列表"""
    out = []
    open_list = None
    for line in text.split("\n"):
        bullet = _BULLET_ITEM.match(line)
        numbered = None if bullet else _NUMBERED_ITEM.match(line)
        kind = "ul" if bullet else "ol" if numbered else None

        if open_list and kind != open_list:
            out.append(f"</{open_list}>")
            out.append("")
            open_list = None

        if kind is None:
            out.append(line)
            continue

        if open_list is None:
            if out and out[-1].strip():
                out.append("")
            out.append(f"<{kind}>")
            open_list = kind
        out.append(f"<li>{(bullet or numbered).group(1)}</li>")

    if open_list:
        out.append(f"</{open_list}>")
    return "\n".join(out)


def _wrap_paragraphs(text):
    blocks = []
    for chunk in _BLANK_LINES.split(text):
        paragraph = []
        for line in chunk.split("\n"):
            if _BLOCK_LINE.match(line):
                if paragraph:
                    blocks.append(f"<p>{'<br>'.join(paragraph)}</p>")
                    paragraph = []
                blocks.append(line.strip())
            elif line.strip() or paragraph:
                paragraph.append(line)
        while paragraph and not paragraph[-1].strip():
            paragraph.pop()
        if paragraph:
            blocks.append(f"<p>{'<br>'.join(paragraph)}</p>")
    return "\n".join(blocks)


def render_markdown(markdown: str) -> str:
    """把模型输出的纯文本/Markdown渲染为清洗后的HTML

    Args:
        markdown: 纯文本或Markdown

    Returns:
        str: 清洗后的HTML
    """
    text = (markdown or "").replace(_MARK, "").replace("\r\n", "\n").replace("\r", "\n").strip()
    if not text:
        return ""

    code_blocks = _Placeholders("CODEBLOCK")
    inline_codes = _Placeholders("CODEINLINE")
    links = _Placeholders("LINK")

    def stash_code_block(match):
        code = match.group(1)
        if code.endswith("\n"):
            code = code[:-1]
        return code_blocks.stash(f"<pre><code>{_escape(code, quote=False)}</code></pre>")

    text = _FENCED_CODE.sub(stash_code_block, text)
    text = _INLINE_CODE.sub(lambda m: inline_codes.stash(f"<code>{_escape(m.group(1), quote=False)}</code>"), text)

    text = _escape(text)

    text = _HEADING.sub(lambda m: f"<h{len(m.group(1))}>{m.group(2)}</h{len(m.group(1))}>", text)
    text = _BLOCKQUOTE.sub(r"<blockquote>\1</blockquote>", text)
    text = _convert_lists(text)

    # 链接整体放进占位符，href 不会被强调规则改写
    text = _LINK.sub(
        lambda m: links.stash(
            f'<a href="{m.group(2)}" target="_blank" rel="noreferrer noopener">{_apply_emphasis(m.group(1))}</a>'
        ),
        text,
    )
    text = _apply_emphasis(text)

    text = _wrap_paragraphs(text)

    text = links.restore(text)
    text = inline_codes.restore(text)
    text = code_blocks.restore(text)

    return sanitize(text)
