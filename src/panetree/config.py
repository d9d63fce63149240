"""panetree 配置

配置分为以下几类：
- 布局配置：分割权重、id 显示长度
- 窗口配置：关闭后延迟销毁时间
- Timer 配置：定时器参数
- 日志/指标配置
"""

import os

# === 布局配置 ===
SPLIT_SIZE_WEIGHT = 100  # 分割后每个子 pane 的比例权重（不是像素）

# === 窗口配置 ===
WINDOW_DESTROY_TIME_MS = 300  # close() 之后到硬删除的宽限期（毫秒）

# === Timer 配置 ===
TIMER_TICK_INTERVAL = 0.05  # Timer tick 间隔（秒）

# === 日志配置 ===
LOG_LEVEL = os.environ.get("PANETREE_LOG_LEVEL", "INFO")  # 日志级别
SHORT_ID_LENGTH = 8  # 日志中 id 截断长度

# === 指标配置 ===
METRICS_ENABLED = True  # 是否启用指标收集
