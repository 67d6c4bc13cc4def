import numpy as np
import pytest

from rbf_surrogate.exceptions import DegenerateGeometryError
from rbf_surrogate.models.assembly import assemble_rhs, assemble_system, check_sample_geometry
from rbf_surrogate.models.kernels import CUBIC, LINEAR, MULTIQUADRIC, THIN_PLATE, RadialFunction, evaluate_kernel
from rbf_surrogate.models.polynomial import make_basis
from rbf_surrogate.models.solver import RCOND_TOLERANCE, estimate_rcond, fit_coefficients, solve_coefficients
from rbf_surrogate.models.storage import DenseStorage, SparseStorage, get_storage


@pytest.mark.parametrize("kernel", [LINEAR, CUBIC, MULTIQUADRIC, THIN_PLATE])
def test_assembled_matrix_is_symmetric(kernel, samples_2d):
    X, _ = samples_2d
    basis = make_basis(2, kernel.degree, [0.0, 0.0], [1.0, 1.0])

    dense = assemble_system(X, kernel, basis, 1.0, DenseStorage())
    sparse = assemble_system(X, kernel, basis, 1.0, SparseStorage()).toarray()

    assert np.array_equal(dense, dense.T)
    assert np.array_equal(sparse, sparse.T)
    assert np.array_equal(dense, sparse)


def test_assembled_blocks(samples_2d):
    X, _ = samples_2d
    n = X.shape[0]
    scale_factor = 2.0
    basis = make_basis(2, 2, [0.0, 0.0], [1.0, 1.0])

    D = assemble_system(X, THIN_PLATE, basis, scale_factor, DenseStorage())
    p = basis.size

    assert D.shape == (n + p, n + p)
    expected_kernel = evaluate_kernel(THIN_PLATE, (X[:, None, :] - X[None, :, :]) / scale_factor)
    assert np.allclose(D[:n, :n], expected_kernel)
    assert np.allclose(D[:n, n:], basis.evaluate(X))
    assert np.allclose(D[n:, :n], basis.evaluate(X).T)
    assert np.all(D[n:, n:] == 0.0)


def test_degree_zero_gives_constant_column(samples_2d):
    X, _ = samples_2d
    n = X.shape[0]
    basis = make_basis(2, 0, [0.0, 0.0], [1.0, 1.0])

    D = assemble_system(X, MULTIQUADRIC, basis, 1.0, DenseStorage())

    assert D.shape == (n + 1, n + 1)
    assert np.all(D[:n, n] == 1.0)
    assert np.all(D[n, :n] == 1.0)
    assert D[n, n] == 0.0


def test_rhs_has_zero_polynomial_rows():
    Y = np.arange(8.0).reshape(4, 2)
    rhs = assemble_rhs(Y, 3)

    assert rhs.shape == (7, 2)
    assert np.array_equal(rhs[:4], Y)
    assert np.all(rhs[4:] == 0.0)


def test_dense_and_sparse_solutions_agree(samples_2d):
    X, y = samples_2d
    Y = np.column_stack([y, 2 * y + 1])
    basis = make_basis(2, 1, [0.0, 0.0], [1.0, 1.0])

    dense = fit_coefficients(X, Y, CUBIC, basis, 1.0, DenseStorage())
    sparse = fit_coefficients(X, Y, CUBIC, basis, 1.0, SparseStorage())

    assert dense.shape == (X.shape[0] + basis.size, 2)
    assert np.allclose(dense, sparse, rtol=1e-6, atol=1e-8)


@pytest.mark.parametrize("storage", [DenseStorage(), SparseStorage()])
def test_singular_system_is_reported(storage):
    # a kernel that is identically zero leaves two identical rows
    null_kernel = RadialFunction(0, lambda z: 0.0)
    X = np.array([[0.0], [1.0]])
    basis = make_basis(1, 0, 0.0, 1.0)

    matrix = assemble_system(X, null_kernel, basis, 1.0, storage)
    with pytest.raises(DegenerateGeometryError):
        solve_coefficients(matrix, assemble_rhs(np.array([[1.0], [2.0]]), basis.size), storage)


def test_duplicate_samples_are_rejected():
    X = np.array([[0.1, 0.2], [0.5, 0.5], [0.1, 0.2], [0.9, 0.3]])
    basis = make_basis(2, 0, [0.0, 0.0], [1.0, 1.0])

    with pytest.raises(DegenerateGeometryError, match="Samples 0 and 2"):
        check_sample_geometry(X, basis)


def test_near_duplicate_samples_are_rejected():
    X = np.array([[0.1, 0.2], [0.5, 0.5], [0.5, 0.5 + 1e-13]])
    basis = make_basis(2, 0, [0.0, 0.0], [1.0, 1.0])

    with pytest.raises(DegenerateGeometryError, match="Samples 1 and 2"):
        check_sample_geometry(X, basis)


def test_samples_above_duplicate_tolerance_pass():
    X = np.array([[0.1, 0.2], [0.5, 0.5], [0.5, 0.5 + 1e-7]])
    basis = make_basis(2, 0, [0.0, 0.0], [1.0, 1.0])

    check_sample_geometry(X, basis)


def test_too_few_samples_for_tail():
    X = np.random.rand(4, 2)
    basis = make_basis(2, 2, [0.0, 0.0], [1.0, 1.0])

    with pytest.raises(DegenerateGeometryError, match="At least 6 samples"):
        check_sample_geometry(X, basis)


def test_get_storage():
    assert isinstance(get_storage("dense"), DenseStorage)
    assert isinstance(get_storage("sparse"), SparseStorage)
    storage = SparseStorage()
    assert get_storage(storage) is storage

    with pytest.raises(ValueError):
        get_storage("banded")


@pytest.mark.parametrize("storage", [DenseStorage(), SparseStorage()])
def test_rcond_estimate_is_close_to_exact(storage, samples_2d):
    X, _ = samples_2d
    basis = make_basis(2, 1, [0.0, 0.0], [1.0, 1.0])
    matrix = assemble_system(X, CUBIC, basis, 1.0, storage)
    full = matrix if isinstance(matrix, np.ndarray) else matrix.toarray()

    exact = 1.0 / np.linalg.cond(full, 1)
    estimate = estimate_rcond(matrix, storage.factorize(matrix), storage)

    assert exact * (1.0 - 1e-6) <= estimate <= 10.0 * exact
    assert estimate > RCOND_TOLERANCE


@pytest.mark.parametrize("storage", [DenseStorage(), SparseStorage()])
def test_ill_conditioned_system_is_reported(storage):
    # non-singular, but the kernel block is 20 orders of magnitude below the tail
    X = np.linspace(0.0, 1.0, 6)[:, None]
    basis = make_basis(1, 0, 0.0, 1.0)
    matrix = assemble_system(X, LINEAR, basis, 1e20, storage)

    with pytest.raises(DegenerateGeometryError, match="ill-conditioned"):
        solve_coefficients(matrix, assemble_rhs(np.sin(X), basis.size), storage)
