import os

# ---- Configuration ----
scale = int(os.environ.get("CHIP8_SCALE", 10))
cpu_hz = int(os.environ.get("CHIP8_CPU_HZ", 600))
timer_hz = 60

beep_frequency = 440
beep_duration = 0.2
sample_rate = 44100

foreground = (255, 255, 255)
background = (0, 0, 0)

LOG_LEVEL = os.environ.get("CHIP8_LOG_LEVEL", "WARNING").upper()
