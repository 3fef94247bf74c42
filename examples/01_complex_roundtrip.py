import logging

import numpy as np

from matbridge import LocalEngine, MatrixProcessor, MatrixValue

logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

engine = LocalEngine()
processor = MatrixProcessor(engine)

# A name the writer would otherwise pick for its temporary real part.
engine.set_variable("field_real", [0.0])

field = np.arange(24, dtype=np.float64).reshape(2, 3, 4) * np.exp(1j * np.pi / 6)
processor.set_matrix("field", MatrixValue.from_array(field))

restored = processor.get_matrix("field")
print(restored, "bound:", engine.variables())
assert restored.lengths == (2, 3, 4)
np.testing.assert_allclose(restored.to_array(), field)
