"""60Hz delay/sound timers and the sound edge."""


class TestTimers:

    def test_tick_decrements_both(self, vm):
        vm.delay, vm.sound = 3, 2
        vm.tick()
        assert (vm.delay, vm.sound) == (2, 1)

    def test_timers_stop_at_zero(self, vm):
        vm.tick()
        assert (vm.delay, vm.sound) == (0, 0)

    def test_beep_fires_once_on_falling_edge(self, vm, beeps):
        vm.sound = 2
        vm.tick()
        assert beeps == []
        vm.tick()
        assert beeps == [True]
        for _ in range(5):
            vm.tick()
        assert beeps == [True]

    def test_no_beep_when_set_to_zero(self, vm, beeps, execute):
        vm.sound = 5
        execute(0xF018)  # V0 == 0
        vm.tick()
        assert vm.sound == 0
        assert beeps == []

    def test_timers_run_while_blocked(self, vm, run):
        vm.delay = 10
        run(0xF00A, steps=2)
        vm.tick()
        assert vm.delay == 9

    def test_timers_frozen_while_paused(self, vm, beeps):
        vm.delay, vm.sound = 5, 1
        vm.pause()
        vm.tick()
        assert (vm.delay, vm.sound) == (5, 1)
        assert beeps == []

    def test_timers_frozen_when_halted(self, vm, run):
        vm.delay = 5
        run(0x0000)
        vm.tick()
        assert vm.delay == 5
