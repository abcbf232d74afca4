from typing import List, Optional, Sequence, Union

from models import ContrastFinding
from schemas import ContrastPayload


class ColorContrastAnalyzer:
    def __init__(self):
        # WCAG 2.1 contrast requirements
        self.MIN_CONTRAST_AA_NORMAL_TEXT = 4.5
        self.MIN_CONTRAST_AA_LARGE_TEXT = 3.0
        self.MIN_CONTRAST_AAA_NORMAL_TEXT = 7.0
        self.MIN_CONTRAST_AAA_LARGE_TEXT = 4.5
        # Large text is defined as 18pt+ or 14pt+ bold
        self.LARGE_TEXT_MIN_POINTS = 18
        self.LARGE_BOLD_TEXT_MIN_POINTS = 14
        self.BOLD_WEIGHTS = {'bold', 'heavy', 'black'}
        # Numeric weights on the 100-900 scale
        self.BOLD_WEIGHT_MIN = 700

    def is_bold(self, font_weight: Union[float, str, None]) -> bool:
        if font_weight is None:
            return False
        if isinstance(font_weight, str):
            weight = font_weight.strip().lower()
            if weight in self.BOLD_WEIGHTS:
                return True
            try:
                font_weight = float(weight)
            except ValueError:
                return False
        return font_weight >= self.BOLD_WEIGHT_MIN

    def is_large_text(self, font_size: Optional[float], font_weight: Union[float, str, None] = None) -> bool:
        """Unknown font sizes are treated as normal text"""
        if font_size is None:
            return False
        if font_size >= self.LARGE_TEXT_MIN_POINTS:
            return True
        return self.is_bold(font_weight) and font_size >= self.LARGE_BOLD_TEXT_MIN_POINTS

    def required_ratios(self, large_text: bool) -> tuple:
        """(AA, AAA) thresholds for the given text class"""
        if large_text:
            return self.MIN_CONTRAST_AA_LARGE_TEXT, self.MIN_CONTRAST_AAA_LARGE_TEXT
        return self.MIN_CONTRAST_AA_NORMAL_TEXT, self.MIN_CONTRAST_AAA_NORMAL_TEXT

    def classify_sample(self, sample: ContrastPayload) -> ContrastFinding:
        """
        Classify one pre-measured sample against WCAG AA and AAA.

        Both tiers are evaluated independently against the same ratio.
        """
        large_text = self.is_large_text(sample.font_size, sample.font_weight)
        aa_ratio, aaa_ratio = self.required_ratios(large_text)

        return ContrastFinding(
            view_id=sample.view_id,
            foreground=sample.foreground_color.to_sample(),
            background=sample.background_color.to_sample(),
            contrast_ratio=sample.contrast_ratio,
            meets_aa=sample.contrast_ratio >= aa_ratio,
            meets_aaa=sample.contrast_ratio >= aaa_ratio,
            large_text=large_text,
            text=sample.text,
            font_size=sample.font_size
        )

    def analyze_contrast(self, samples: Sequence[ContrastPayload]) -> List[ContrastFinding]:
        """
        Classify contrast samples reported by the debug server

        Args:
            samples: Validated samples, each carrying a pre-computed ratio

        Returns:
            List[ContrastFinding] - One finding per sample, in input order
        """
        return [self.classify_sample(sample) for sample in samples]
