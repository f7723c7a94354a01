from arte.seed import (
    create_seeded_random,
    generate_token,
    lane_hashes,
    token_to_seed,
    validate_token,
)


def test_empty_token_seeds_to_zero():
    assert token_to_seed("") == 0


def test_seed_matches_hand_computed_values():
    assert token_to_seed("a") == 97
    assert token_to_seed("ab") == 97 * 31 + 98
    assert token_to_seed("abc") == (97 * 31 + 98) * 31 + 99


def test_seed_wraps_like_int32():
    # Same recurrence as Java's String.hashCode
    assert token_to_seed("hello") == 99162322
    # Lands exactly on -2**31; abs() must not wrap back to negative
    assert token_to_seed("polygenelubricants") == 2147483648


def test_seed_is_deterministic_and_collisions_are_allowed():
    t = "fx-mosaic-v2.0123456789abcdef.abc"
    assert token_to_seed(t) == token_to_seed(t)
    assert token_to_seed("Aa") == token_to_seed("BB")


def test_seed_always_non_negative_32bit():
    for t in ["zzzzzzzzzzzzzzzzzzzz", "fx-" + "Z" * 60, "ünïcødé 🎨"]:
        s = token_to_seed(t)
        assert 0 <= s <= 2**31


def test_generated_tokens_validate():
    token = generate_token()
    assert token.startswith("fx-")
    assert len(token) == 53
    assert validate_token(token)


def test_tampered_legacy_token_fails_checksum():
    token = generate_token()
    body = token[3:51]
    swapped = ("2" if body[0] != "2" else "3") + body[1:]
    assert not validate_token("fx-" + swapped + token[51:])
    assert not validate_token("fx-short")


def test_lane_hashes_split_characters_round_robin():
    assert lane_hashes("abcd") == [97, 98, 99, 100]
    assert lane_hashes("abcde") == [97 * 31 + 101, 98, 99, 100]


def test_seeded_random_is_reproducible():
    r1 = create_seeded_random("fx-some-token")
    r2 = create_seeded_random("fx-some-token")
    a = [r1() for _ in range(50)]
    b = [r2() for _ in range(50)]
    assert a == b
    assert all(0.0 <= x < 1.0 for x in a)
    assert len(set(a)) > 40


def test_seeded_random_differs_per_token():
    r1 = create_seeded_random("fx-token-one")
    r2 = create_seeded_random("fx-token-two")
    assert [r1() for _ in range(5)] != [r2() for _ in range(5)]


def test_seeded_random_matches_browser_draws():
    # Reference values from the browser sfc32 implementation
    r = create_seeded_random("a")
    assert [r() for _ in range(5)] == [
        2.2817403078079224e-08,
        4.656612873077393e-10,
        2.0605511963367462e-07,
        0.4306642732117325,
        0.4405064107850194,
    ]
    r = create_seeded_random("")
    assert [r() for _ in range(5)] == [
        2.3283064365386963e-10,
        4.656612873077393e-10,
        2.7939677238464355e-09,
        0.004394538467749953,
        0.013194353086873889,
    ]
    r = create_seeded_random("fx-7yQk2pLmN4rS8tVwXz3aBcDeFgHjKmNpQrStUvWxYz2345678")
    assert [r() for _ in range(3)] == [0.842695796629414, 0.9419807267840952, 0.18375296937301755]
