import pytest

LOGIN_FEATURE = '''\
@auth @smoke
Feature: User Login
  As a registered user
  I want to log in

  # shared setup
  Background:
    Given the application is running

  @happy
  Scenario: Successful login
    Given I am on the login page
    When I enter valid credentials
      | username | password |
      | alice    | secret   |
    Then I should see the dashboard

  Scenario: Login with note
    Given I am on the login page
    When I submit the form
      """
      {"user": "bob"}
      """
    Then I should see an error
'''

OUTLINE_FEATURE = '''\
Feature: Shopping cart

  Scenario Outline: Add items
    Given I have <count> items
    When I add <extra> items
    Then I should have <total> items

    Examples:
      | count | extra | total |
      | 1     | 2     | 3     |
      | 0     | 5     | 5     |
'''


@pytest.fixture
def login_feature():
    return LOGIN_FEATURE


@pytest.fixture
def outline_feature():
    return OUTLINE_FEATURE
