"""Shared fixtures for paper2meta tests."""

import pytest


SAMPLE_PAPER = """Effects of Early Mobilisation on Recovery After Cardiac Surgery
Authors: Maria Lopez, James Chen and Priya Natarajan
Journal: Clinical Rehabilitation Review
Published 2019. DOI: 10.1177/0269215519845123.

Abstract: Early mobilisation after cardiac surgery is widely recommended, yet the evidence for its effect on recovery remains limited. We conducted a randomised trial in 240 adults.
Keywords: cardiac surgery; rehabilitation; mobilisation; randomised controlled trial

1. Introduction
Cardiac surgery is followed by a long period of reduced activity. Prolonged bed rest is associated with muscle loss and delayed discharge, and several guidelines now recommend early mobilisation.
2. Methods
Adults undergoing elective surgery were randomised to usual care or a structured programme.
3. Results
Patients in the intervention group walked sooner and were discharged 1.4 days earlier on average than patients receiving usual care.
4. Discussion
The findings agree with earlier observational work.
5. Conclusion
A structured early mobilisation programme shortened hospital stay without increasing adverse events in adults after cardiac surgery.
References
1. Smith A. Bed rest after surgery. 2010.
"""

SAMPLE_ABSTRACT = (
    "Early mobilisation after cardiac surgery is widely recommended, yet the evidence "
    "for its effect on recovery remains limited. We conducted a randomised trial in 240 adults."
)


@pytest.fixture
def sample_paper():
    """A small, well-structured paper as plain text."""
    return SAMPLE_PAPER


@pytest.fixture
def sample_abstract():
    return SAMPLE_ABSTRACT
