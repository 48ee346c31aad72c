import random

import pytest

from agrobase.diagnosis import check_contract, parse_record, violations
from agrobase.errors import ContractViolation, ModelError

from conftest import HIGH, LOW, UNRECOGNIZED, VET, record


@pytest.mark.parametrize("data", [
    HIGH,
    {**HIGH, "confidence": "Medium", "medicines": ["Fungicide"]},
    {**HIGH, "medicines": ["A", "B", "C"]},
    LOW,
    UNRECOGNIZED,
])
def test_consistent_records_pass(data):
    rec = record(data)
    assert violations(rec) == []
    assert check_contract(rec) is rec


# Each case breaks exactly one rule.
@pytest.mark.parametrize("data", [
    {**UNRECOGNIZED, "diseaseName": "Rust"},
    {**UNRECOGNIZED, "effects": ["Spots", "Wilting"]},
    {**UNRECOGNIZED, "medicines": ["Fungicide"]},
    {**UNRECOGNIZED, "confidence": "Low"},
    {k: v for k, v in UNRECOGNIZED.items() if k != "veterinaryInfo"},
    {**HIGH, "veterinaryInfo": VET},
    {**HIGH, "effects": ["A", "B", "C"]},
    {**HIGH, "confidence": "Medium", "effects": ["A"]},
    {**HIGH, "medicines": []},
    {**HIGH, "medicines": ["A", "B", "C", "D"]},
    {**HIGH, "confidence": "Unknown"},
    {**HIGH, "diseaseName": "Unknown"},
    {**HIGH, "diseaseName": "   "},
    {k: v for k, v in LOW.items() if k != "veterinaryInfo"},
    {**LOW, "medicines": ["Copper spray"]},
    {**LOW, "veterinaryInfo": {**VET, "phone": " "}},
], ids=[
    "unrecognized-named", "unrecognized-effects", "unrecognized-medicines",
    "unrecognized-confidence", "unrecognized-no-vet", "high-with-vet", "high-three-effects",
    "medium-one-effect", "high-no-medicine", "high-four-medicines", "recognized-unknown-confidence",
    "recognized-unknown-name", "recognized-blank-name", "low-no-vet", "low-real-medicine",
    "blank-vet-phone",
])
def test_each_broken_rule_is_a_contract_violation(data):
    rec = record(data)
    assert len(violations(rec)) == 1
    with pytest.raises(ContractViolation) as exc:
        check_contract(rec)
    assert len(exc.value.violations) == 1
    assert exc.value.retryable is False


def test_mixed_branches_report_every_violation():
    rec = record(UNRECOGNIZED, effects=["Spots", "Wilting"], medicines=["Fungicide"], confidence="High")
    with pytest.raises(ContractViolation) as exc:
        check_contract(rec)
    assert len(exc.value.violations) == 3


def test_parse_record_reads_json_and_code_fences():
    assert parse_record('{"isRecognized": false, "diseaseName": "Unknown", "effects": [], '
                        '"medicines": [], "confidence": "Unknown"}').is_recognized is False
    fenced = '```json\n{"isRecognized": true, "diseaseName": "Rust", "effects": ["A", "B"], ' \
             '"medicines": ["M1"], "confidence": "Medium"}\n```'
    assert parse_record(fenced).disease_name == "Rust"


@pytest.mark.parametrize("raw", [
    "I think this is rust.",
    "[1, 2, 3]",
    '{"isRecognized": true, "diseaseName": "Rust"}',
    '{"isRecognized": true, "diseaseName": "Rust", "effects": ["A", "B"], '
    '"medicines": ["M1"], "confidence": "Certain"}',
])
def test_parse_record_rejects_unparseable_output(raw):
    with pytest.raises(ModelError):
        parse_record(raw)


# ---- Generated records -------------------------------------------------------
DISEASES = ["Leaf Blight", "Apple Scab", "Foot and Mouth Disease", "Lumpy Skin", "Powdery Mildew", "Rust"]
SYMPTOMS = ["Yellowing leaves", "Brown spots", "Wilting", "Fever", "Reduced milk yield", "Lesions", "Lameness"]
TREATMENTS = ["Mancozeb spray", "Copper oxychloride", "Neem oil", "Oxytetracycline", "Sulphur dust"]


def _vet(rng):
    return {
        "name": f"{rng.choice(['Green Valley', 'Sunrise', 'Kisan'])} Agro Clinic",
        "phone": f"+91 {rng.randint(70000, 99999)} {rng.randint(10000, 99999)}",
        "address": f"{rng.randint(1, 200)} Market Road, {rng.choice(['Nashik', 'Pune', 'Indore'])}",
    }


def _confident(rng):
    return {
        "isRecognized": True,
        "diseaseName": rng.choice(DISEASES),
        "effects": rng.sample(SYMPTOMS, 2),
        "medicines": rng.sample(TREATMENTS, rng.randint(1, 3)),
        "confidence": rng.choice(["High", "Medium"]),
    }


def _low(rng):
    return {
        "isRecognized": True,
        "diseaseName": rng.choice(DISEASES),
        "effects": rng.sample(SYMPTOMS, 2),
        "medicines": ["Consult a professional"],
        "confidence": "Low",
        "veterinaryInfo": _vet(rng),
    }


def _unrecognized(rng):
    return {**UNRECOGNIZED, "veterinaryInfo": _vet(rng)}


def _wrong_effect_count(rng, d):
    return {**d, "effects": rng.sample(SYMPTOMS, rng.choice([0, 1, 3, 4, 5]))}


def _blank_vet_field(rng, d):
    return {**d, "veterinaryInfo": {**d["veterinaryInfo"], rng.choice(["name", "phone", "address"]): " " * rng.randint(0, 3)}}


def _without_vet(rng, d):
    return {k: v for k, v in d.items() if k != "veterinaryInfo"}


BRANCHES = {
    "confident": (_confident, [
        _wrong_effect_count,
        lambda rng, d: {**d, "medicines": rng.sample(TREATMENTS, rng.choice([0, 4, 5]))},
        lambda rng, d: {**d, "veterinaryInfo": _vet(rng)},
        lambda rng, d: {**d, "diseaseName": rng.choice(["Unknown", "", "  "])},
        lambda rng, d: {**d, "confidence": "Unknown", "medicines": []},
    ]),
    "low": (_low, [
        _wrong_effect_count,
        lambda rng, d: {**d, "medicines": rng.sample(TREATMENTS, rng.randint(0, 3))},
        _without_vet,
        _blank_vet_field,
    ]),
    "unrecognized": (_unrecognized, [
        lambda rng, d: {**d, "diseaseName": rng.choice(DISEASES)},
        lambda rng, d: {**d, "effects": rng.sample(SYMPTOMS, rng.randint(1, 3))},
        lambda rng, d: {**d, "medicines": rng.sample(TREATMENTS, rng.randint(1, 3))},
        lambda rng, d: {**d, "confidence": rng.choice(["High", "Medium", "Low"])},
        _without_vet,
        _blank_vet_field,
    ]),
}


@pytest.mark.parametrize("seed", range(60))
def test_generated_records_break_exactly_the_mutated_rule(seed):
    rng = random.Random(seed)
    make, mutations = BRANCHES[rng.choice(sorted(BRANCHES))]
    valid = make(rng)
    assert violations(record(valid)) == []

    broken = record(rng.choice(mutations)(rng, valid))
    assert len(violations(broken)) == 1
    with pytest.raises(ContractViolation) as exc:
        check_contract(broken)
    assert exc.value.violations == violations(broken)
