#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
aitrans 工具使用大模型翻译HTML片段或纯文本，保留原始的HTML结构。
主要特点:
1. 只替换文本节点，标签和属性保持不变
2. 所有文本一次性批量翻译，译文按位置写回
3. 输出经过白名单清洗，可以安全显示
4. 纯文本输入按Markdown渲染为HTML
"""

import sys
from aitrans.cli import main

if __name__ == "__main__":
    sys.exit(main())
