"""Campus Hub - 校园设施预订与报修系统"""
