from bdd_forge.codegen import naming
from bdd_forge.codegen.naming import (
    capture_types,
    class_name_for,
    java_comment,
    java_string,
    parameter_name,
    step_method_name,
    step_pattern,
)


class TestIdentifierNames:
    """Test derivation of Java identifiers from feature text"""

    def test_class_name(self):
        """Test feature names become PascalCase test classes"""
        assert class_name_for("User Login") == "UserLoginTest"
        assert class_name_for("shopping CART") == "ShoppingCartTest"
        assert class_name_for("user-login flow!") == "UserloginFlowTest"

    def test_class_name_with_leading_digit(self):
        """Test a feature name starting with a number still gives a Java identifier"""
        assert class_name_for("2FA Login") == "Feature2faLoginTest"
        assert class_name_for("404 page") == "Feature404PageTest"
        assert class_name_for("!!!") == "Test"

    def test_test_method_name(self):
        """Test scenario names become test methods"""
        assert naming.test_method_name("Successful login") == "testSuccessfulLogin"
        assert naming.test_method_name("Handle {json} payload") == "testHandleJsonPayload"

    def test_step_method_name(self):
        """Test keyword-prefixed camelCase stub names"""
        assert step_method_name("Given", "I am on the login page") == "givenIAmOnTheLoginPage"
        assert step_method_name("When", 'I enter "admin" as USER') == "whenIEnterAdminAsUser"
        assert step_method_name("And", "the Admin has 3 roles") == "andTheAdminHas3Roles"

    def test_same_words_share_a_name(self):
        """Test punctuation differences collapse to one stub"""
        assert step_method_name("Then", "I see it!") == step_method_name("Then", "I see it")


class TestStepPattern:
    """Test Cucumber pattern derivation"""

    def test_numbers_and_capitalized_words(self):
        """Test digits and capitalized words become captures"""
        assert step_pattern("I have 5 items in Cart") == r"^I have (\d+) items in (.+)$"

    def test_single_capital_letter_is_literal(self):
        """Test a lone capital letter is not captured"""
        assert step_pattern("I am on the login page") == "^I am on the login page$"

    def test_capture_types(self):
        """Test parameter types follow capture order"""
        assert capture_types(step_pattern("the Admin has 3 roles")) == ["String", "int"]
        assert capture_types("^nothing here$") == []


class TestParameterName:
    """Test Examples headers as Java parameters"""

    def test_camel_case(self):
        assert parameter_name("user name", 0) == "userName"

    def test_unusable_names_fall_back(self):
        """Test keywords, digits and empty labels"""
        assert parameter_name("class", 1) == "arg1"
        assert parameter_name("2fa", 2) == "arg2"
        assert parameter_name("???", 3) == "arg3"

    def test_duplicates(self):
        """Test a name already taken gets the column index"""
        assert parameter_name("a", 1, taken=["a"]) == "a1"


class TestJavaLiterals:
    """Test escaping of free text"""

    def test_java_string(self):
        """Test quotes, backslashes and control characters"""
        assert java_string('say "hi"') == '"say \\"hi\\""'
        assert java_string("a\\b") == '"a\\\\b"'
        assert java_string("line\nbreak\ttab") == '"line\\nbreak\\ttab"'

    def test_java_string_braces(self):
        """Test braces are written as unicode escapes"""
        assert java_string("{x}") == '"\\u007Bx\\u007D"'
        assert "{" not in java_string("{{}}")

    def test_java_comment(self):
        """Test comment text stays on one line without braces"""
        assert java_comment("multi\nline  text {}") == "multi line text \\u007B\\u007D"
        assert java_comment("C:\\unit") == "C:\\\\unit"
