from core.models import AnalysisResult, AnalysisType, Atom3D, Bond, MoleculeStructure, new_result


def test_structure_from_model_json() -> None:
    """Test parsing of the camelCase structure payload."""
    structure = MoleculeStructure.from_dict(
        {
            "smiles": "CCO",
            "verificationNote": "Verified against PubChem",
            "atoms": [
                {"element": "C", "x": 0, "y": 0, "z": 0},
                {"element": "O", "x": "1.4", "y": 0, "z": 0},
                {"element": "H", "x": True, "y": 0, "z": 0},
                {"element": "H", "x": 1, "y": "nan", "z": 0},
                "junk",
            ],
            "bonds": [{"from": 0, "to": 1}, {"from": 0}],
            "structure2D": {"atoms": [{"id": 0, "element": "C", "x": 1, "y": 2}], "bonds": []},
        }
    )
    assert structure.smiles == "CCO"
    assert structure.verification_note == "Verified against PubChem"
    assert structure.atoms == (Atom3D("C", 0.0, 0.0, 0.0), Atom3D("O", 1.4, 0.0, 0.0))
    assert structure.bonds == (Bond(0, 1, 1),)
    assert not structure.structure_2d.is_empty()


def test_structure_from_non_dict() -> None:
    """Test that missing structures stay None."""
    assert MoleculeStructure.from_dict(None) is None
    assert MoleculeStructure.from_dict("CCO") is None


def test_bond_round_trip_keys() -> None:
    """Test the JSON keys used for bonds."""
    assert Bond.from_dict({"from": 2, "to": 3, "order": 4}).to_dict() == {"from": 2, "to": 3, "order": 4}


def test_new_result_tags_domain() -> None:
    """Test result creation."""
    result = new_result(AnalysisType.IMAGE, "Aspirin", {"domain": "Pharmacology"})
    assert result.type is AnalysisType.IMAGE
    assert result.domain_tag == "Pharmacology"
    assert result.domain == "Pharmacology"
    assert result.id.isdigit()


def test_result_domain_default() -> None:
    """Test the fallback domain."""
    result = AnalysisResult(id="1", type=AnalysisType.TEXT, timestamp=0.0, title="t")
    assert result.domain == "General Science"
    assert result.domain_tag is None
