# We're subclassing pyglet (that'll handle graphics, sound output, and keyboard handling)
# and overriding whatever def we need from there. The Chip8 core only sees the key
# vector we push into it; everything about pixels, scaling and sound lives here.

import logging

import numpy as np
import pyglet
from pyglet.media import synthesis
from pyglet.media.exceptions import MediaException
from pyglet.window import key

from . import config
from .constants import HEIGHT, KEY_COUNT, WIDTH
from .state import Status

logger = logging.getLogger(__name__)

#map binding keys
keymap = {
    key._1: 0x1, key._2: 0x2, key._3: 0x3, key._4: 0xC,
    key.Q: 0x4, key.W: 0x5, key.E: 0x6, key.R: 0xD,
    key.A: 0x7, key.S: 0x8, key.D: 0x9, key.F: 0xE,
    key.Z: 0xA, key.X: 0x0, key.C: 0xB, key.V: 0xF,
}


def generate_beep(duration=config.beep_duration, frequency=config.beep_frequency,
                  sample_rate=config.sample_rate):
    # Use a Sine waveform from pyglet.media.synthesis
    wave = synthesis.Sine(duration=duration, frequency=frequency, sample_rate=sample_rate)
    return pyglet.media.StaticSource(wave)


def render_frame(frame, scale=config.scale, fg=config.foreground, bg=config.background):
    """Turn a (HEIGHT, WIDTH) 0/1 frame into scaled RGBA rows, bottom row first."""
    rgba = np.empty((HEIGHT, WIDTH, 4), dtype=np.uint8)
    rgba[..., :3] = np.where(frame[..., None] != 0, fg, bg)
    rgba[..., 3] = 255
    # pyglet's origin is bottom-left
    rgba = np.flipud(rgba)
    if scale != 1:
        rgba = np.repeat(np.repeat(rgba, scale, axis=0), scale, axis=1)
    return np.ascontiguousarray(rgba)


class Chip8Window(pyglet.window.Window):

    def __init__(self, vm, title="CHIP-8 Emulator", cpu_hz=config.cpu_hz, scale=config.scale):
        self.scale = scale
        super().__init__(
            width=WIDTH * scale,
            height=HEIGHT * scale,
            caption=title,
            resizable=False,
        )
        self.vm = vm
        self.cpu_hz = cpu_hz
        self.key_inputs = [0] * KEY_COUNT
        self.exit_code = 0

        self.beep_sound = generate_beep()
        self.vm.on_beep = self._play_beep

        #creating ImageData once, updated in place when the VM draws
        self.image = pyglet.image.ImageData(
            self.width,
            self.height,
            'RGBA',
            render_frame(self.vm.frame(), self.scale).tobytes()
        )

        # Performance tracking counters
        self._fps_counter = 0
        self._cps_counter = 0

        # Labels for HUD
        self.fps_label = self._label("FPS: 0", self.height - 15)
        self.cps_label = self._label("Cycles/s: 0", self.height - 30)
        self.pause_label = self._label("PAUSED", self.height - 45)

        # Schedule the loops
        pyglet.clock.schedule_interval(self._cpu_tick, 1.0 / self.cpu_hz)
        pyglet.clock.schedule_interval(self._timer_tick, 1.0 / config.timer_hz)
        pyglet.clock.schedule_interval(self._update_bench, 1.0)

    def _label(self, text, y):
        return pyglet.text.Label(
            text,
            font_size=12,
            x=5,
            y=y,
            anchor_x='left',
            anchor_y='center',
            color=(255, 255, 255, 255)
        )

    # ---- CPU cycle ----
    def _cpu_tick(self, dt):
        # the clock rarely fires at the full rate, so catch up on missed cycles
        self.vm.set_keys(self.key_inputs)
        for _ in range(max(1, round(dt * self.cpu_hz))):
            state = self.vm.step()
            if state.status is Status.PAUSED:
                return
            self._cps_counter += 1
            if state.is_halted:
                print("Emulation error:", state.error)
                self.exit_code = 1
                self.close()
                return
            if state.status is Status.BLOCKED:
                return

    # ---- timers ----
    def _timer_tick(self, dt):
        self.vm.tick()

    def _play_beep(self):
        try:
            self.beep_sound.play()
        except MediaException as e:
            logger.warning("beep failed: %s", e)

    # FPS / CPS
    def _update_bench(self, dt):
        self.fps_label.text = f"FPS: {self._fps_counter / dt:.1f}"
        self.cps_label.text = f"Cycles/s: {self._cps_counter}"
        self._fps_counter = 0
        self._cps_counter = 0

    # ---- Drawing ----
    def on_draw(self):
        if self.vm.should_draw:
            #updates existing image without creating new object
            self.image.set_data('RGBA', self.width * 4, render_frame(self.vm.frame(), self.scale).tobytes())
            self.vm.should_draw = False

        self.clear()
        self.image.blit(0, 0)
        self.fps_label.draw()
        self.cps_label.draw()
        if self.vm.state.status is Status.PAUSED:
            self.pause_label.draw()
        self._fps_counter += 1

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        #@Override
        if symbol == key.ESCAPE:
            self.close()
        elif symbol == key.F1:
            self._toggle_logs()
        elif symbol == key.P:
            if self.vm.state.status is Status.PAUSED:
                self.vm.resume()
            else:
                self.vm.pause()
        elif symbol in keymap:
            self.key_inputs[keymap[symbol]] = 1

    def on_key_release(self, symbol, modifiers):
        #@Override
        if symbol in keymap:
            self.key_inputs[keymap[symbol]] = 0

    def _toggle_logs(self):
        package_logger = logging.getLogger("chip8vm")
        if package_logger.getEffectiveLevel() > logging.DEBUG:
            package_logger.setLevel(logging.DEBUG)
        else:
            package_logger.setLevel(config.LOG_LEVEL)
        logger.warning("logsOn: %s", package_logger.level == logging.DEBUG)

    def close(self):
        pyglet.clock.unschedule(self._cpu_tick)
        pyglet.clock.unschedule(self._timer_tick)
        pyglet.clock.unschedule(self._update_bench)
        super().close()
