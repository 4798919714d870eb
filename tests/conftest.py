import pytest

SAMPLE_SOURCE = """\
/// Adds two numbers.
/// Returns the sum without carry.
fn add(a: u32, b: u32) -> u32 {
    let (_, sum): (bool, u32) = jet::add_32(a, b);
    sum
}

fn main() {
    let x: u32 = add(witness::A, jet::max_32(1, 2));
    assert!(jet::eq_32(x, 3));
}
"""


@pytest.fixture
def sample_source() -> str:
    return SAMPLE_SOURCE
