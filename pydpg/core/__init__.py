from .mesh import Mesh
from .topology import Node, Edge, Element
from .dofhandler import DofHandler
__all__ = ['Mesh', 'Node', 'Edge', 'Element', 'DofHandler']
