from .spaces import H1, L2, HDiv
from .compound import CompoundSpace
__all__ = ['H1', 'L2', 'HDiv', 'CompoundSpace']
