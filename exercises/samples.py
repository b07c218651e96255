"""Bundled code snippets for practice sessions."""

SAMPLE_SNIPPETS: dict[str, str] = {
    "fizzbuzz": """\
def fizzbuzz(n):
    for i in range(1, n + 1):
        if i % 15 == 0:
            print("FizzBuzz")
        elif i % 3 == 0:
            print("Fizz")
        elif i % 5 == 0:
            print("Buzz")
        else:
            print(i)
""",
    "factorial": """\
def factorial(n):
    if n <= 1:
        return 1
    return n * factorial(n - 1)
""",
    "player_controller": """\
public class PlayerController : MonoBehaviour
{
    public float speed = 5f;

    void Update()
    {
        float move = Input.GetAxis("Horizontal");
        transform.Translate(move * speed * Time.deltaTime, 0, 0);
    }
}
""",
    "sum_array": """\
function sumArray(values) {
  let total = 0;
  for (const value of values) {
    total += value;
  }
  return total;
}
""",
}

DEFAULT_SNIPPET = "fizzbuzz"


def get_snippet(name: str) -> str:
    """Return the snippet registered under ``name``.

    Raises:
        KeyError: If no snippet has that name.
    """
    return SAMPLE_SNIPPETS[name]
