from .global_matrix import assemble_matrix, assemble_vector
__all__ = ['assemble_matrix', 'assemble_vector']
