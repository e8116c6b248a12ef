import unittest

from lever import config as cfg
from run_comparison import describe_bar_offsets


class RunnerOutputTests(unittest.TestCase):
    def test_bar_offsets_are_labelled_forward_then_along_trunk(self) -> None:
        text = describe_bar_offsets()
        self.assertIn("(forward, along trunk)", text)
        for name, (forward, along) in cfg.BAR_POSITIONS.items():
            self.assertIn(f"{name} {forward:+.2f}/{along:+.2f}", text)
        self.assertIn("lowBar -0.12/-0.05", text)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
